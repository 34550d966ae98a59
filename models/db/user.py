import secrets
from datetime import datetime

from sqlalchemy import Enum, Unicode
from sqlalchemy.orm import Mapped, mapped_column

from models.db.base import Base
from models.user_role import UserRole
from models.utc_datetime import UTCDateTime
from utils import utcnow


class User(Base):
    """
    Account row maintained by the authentication service.

    Reports only ever expose id, name and email of their reporter.
    """

    __tablename__ = 'user'

    id: Mapped[str] = mapped_column(
        Unicode(32),
        init=False,
        nullable=False,
        primary_key=True,
        default_factory=lambda: secrets.token_urlsafe(16),
    )

    name: Mapped[str] = mapped_column(Unicode, nullable=False)
    email: Mapped[str] = mapped_column(Unicode, nullable=False, unique=True)
    role: Mapped[UserRole] = mapped_column(
        Enum(
            UserRole,
            name='role',
            native_enum=False,
            create_constraint=True,
            length=16,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=UserRole.USER,
    )
    password_hash: Mapped[str | None] = mapped_column(Unicode, nullable=True, default=None)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        init=False,
        nullable=False,
        default_factory=utcnow,
    )
