import secrets
from datetime import datetime

from sqlalchemy import BigInteger, Enum, Float, ForeignKey, Index, Integer, Unicode
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.db.base import Base
from models.db.user import User
from models.pothole_status import PotholeStatus
from models.utc_datetime import UTCDateTime


class Pothole(Base):
    __tablename__ = 'pothole'

    # insertion order, breaks created_at ties
    seq: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer(), 'sqlite'),
        init=False,
        nullable=False,
        primary_key=True,
        autoincrement=True,
    )

    id: Mapped[str] = mapped_column(
        Unicode(32),
        init=False,
        nullable=False,
        unique=True,
        default_factory=lambda: secrets.token_urlsafe(16),
    )

    distance: Mapped[float] = mapped_column(Float, nullable=False)
    image: Mapped[str] = mapped_column(Unicode, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    vehicle_name: Mapped[str] = mapped_column(Unicode, nullable=False)
    vehicle_ground_level: Mapped[float] = mapped_column(Float, nullable=False)

    status: Mapped[PotholeStatus] = mapped_column(
        Enum(
            PotholeStatus,
            name='pothole_status',
            native_enum=False,
            create_constraint=True,
            length=16,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=PotholeStatus.PENDING,
    )

    reported_by_id: Mapped[str] = mapped_column(ForeignKey(User.id), nullable=False)
    reporter: Mapped[User] = relationship(init=False, lazy='raise')

    # assigned by PotholeRepository.create
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, init=False, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, init=False, nullable=False)

    __table_args__ = (
        Index('pothole_created_at_idx', created_at),
        Index('pothole_status_created_at_idx', status, created_at),
    )
