import math

from sentry_sdk import trace

from exceptions import ValidationError
from models.acting_user import ActingUser
from models.pothole import PotholePage, PotholeRecord
from models.pothole_status import PotholeStatus
from services.pothole_repository import PotholeRepository, normalize_pagination


class PotholeQueryService:
    """
    Read access to reports. Every authenticated user sees every report.
    """

    def __init__(self, repository: PotholeRepository) -> None:
        self._repository = repository

    @trace
    async def list(self, status: str | None, page: int, page_size: int, user: ActingUser) -> PotholePage:
        status_filter = _parse_status_filter(status)
        page, page_size = normalize_pagination(page, page_size)

        result = await self._repository.find(status_filter, page, page_size)

        return PotholePage(
            items=result.items,
            total_pages=math.ceil(result.total_count / page_size),
            current_page=page,
            total_records=result.total_count,
        )

    @trace
    async def get(self, id: str, user: ActingUser) -> PotholeRecord:
        return await self._repository.get_by_id(id)


def _parse_status_filter(status: str | None) -> PotholeStatus | None:
    if not status:
        return None
    try:
        return PotholeStatus(status)
    except ValueError:
        raise ValidationError('Invalid status value') from None
