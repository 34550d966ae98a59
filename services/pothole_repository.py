from dataclasses import dataclass

from sentry_sdk import trace
from sqlalchemy import Select, delete, func, select, update
from sqlalchemy.orm import joinedload

from db import Database
from exceptions import NotFoundError, ValidationError
from models.db.pothole import Pothole
from models.db.user import User
from models.pothole import PotholeRecord
from models.pothole_status import PotholeStatus
from utils import utcnow


@dataclass(frozen=True, slots=True)
class FindResult:
    items: tuple[PotholeRecord, ...]
    total_count: int


def normalize_pagination(page: int, page_size: int) -> tuple[int, int]:
    """
    Clamp page and page size to at least 1.
    """
    return max(page, 1), max(page_size, 1)


class PotholeRepository:
    """
    Persistence of pothole reports. No business validation happens here.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    @trace
    async def create(self, pothole: Pothole) -> PotholeRecord:
        now = utcnow()
        pothole.created_at = now
        pothole.updated_at = now

        async with self._db.write() as session:
            if await session.get(User, pothole.reported_by_id) is None:
                raise ValidationError(f'Unknown reporter {pothole.reported_by_id!r}')
            session.add(pothole)

        return await self.get_by_id(pothole.id)

    @trace
    async def get_by_id(self, id: str) -> PotholeRecord:
        async with self._db.read() as session:
            stmt = _select_with_reporter().where(Pothole.id == id)
            pothole = await session.scalar(stmt)

        if pothole is None:
            raise NotFoundError('Pothole not found')

        return PotholeRecord.from_db(pothole)

    @trace
    async def update_status(self, id: str, status: PotholeStatus) -> PotholeRecord:
        async with self._db.write() as session:
            stmt = (
                update(Pothole)
                .where(Pothole.id == id)
                .values({Pothole.status: status, Pothole.updated_at: utcnow()})
            )
            result = await session.execute(stmt)
            if result.rowcount == 0:
                raise NotFoundError('Pothole not found')

        return await self.get_by_id(id)

    @trace
    async def delete(self, id: str) -> None:
        async with self._db.write() as session:
            stmt = delete(Pothole).where(Pothole.id == id)
            result = await session.execute(stmt)
            if result.rowcount == 0:
                raise NotFoundError('Pothole not found')

    @trace
    async def find(self, status: PotholeStatus | None, page: int, page_size: int) -> FindResult:
        """
        Most recent reports first, offset-paginated.
        """
        page, page_size = normalize_pagination(page, page_size)

        where = () if status is None else (Pothole.status == status,)

        async with self._db.read() as session:
            # counts only rows the joined page query can return
            count_stmt = select(func.count()).select_from(Pothole).join(Pothole.reporter).where(*where)
            total_count = (await session.execute(count_stmt)).scalar_one()

            stmt = (
                _select_with_reporter()
                .where(*where)
                .order_by(Pothole.created_at.desc(), Pothole.seq.desc())
                .offset((page - 1) * page_size)
                .limit(page_size)
            )
            potholes = (await session.scalars(stmt)).all()

        return FindResult(
            items=tuple(PotholeRecord.from_db(p) for p in potholes),
            total_count=total_count,
        )


def _select_with_reporter() -> Select[tuple[Pothole]]:
    return select(Pothole).options(
        joinedload(Pothole.reporter, innerjoin=True).load_only(User.id, User.name, User.email, raiseload=True)
    )
