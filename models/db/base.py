from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase, MappedAsDataclass


class Base(MappedAsDataclass, DeclarativeBase, kw_only=True):
    metadata = MetaData(
        naming_convention={
            'ix': '%(table_name)s_%(column_0_name)s_idx',
            'uq': '%(table_name)s_%(column_0_name)s_key',
            'ck': '%(table_name)s_%(constraint_name)s_check',
            'fk': '%(table_name)s_%(column_0_name)s_fkey',
            'pk': '%(table_name)s_pkey',
        }
    )
