import logging
import math

from sentry_sdk import trace

from exceptions import ValidationError
from models.acting_user import ActingUser
from models.db.pothole import Pothole
from models.pothole import PotholeRecord
from models.pothole_status import PotholeStatus
from models.pothole_submission import PotholeSubmission
from services.image_store import ImageStore
from services.pothole_repository import PotholeRepository


class PotholeService:
    """
    Registration, triage and removal of pothole reports.

    Admin-only operations (update_status, remove) are gated by the API layer.
    """

    def __init__(self, repository: PotholeRepository, image_store: ImageStore) -> None:
        self._repository = repository
        self._image_store = image_store

    @trace
    async def register(self, submission: PotholeSubmission, user: ActingUser) -> PotholeRecord:
        if submission.image is None:
            raise ValidationError('Image is required')

        distance = _parse_number('distance', submission.distance)
        longitude = _parse_number('longitude', submission.longitude)
        latitude = _parse_number('latitude', submission.latitude)
        vehicle_ground_level = _parse_number('vehicle_ground_level', submission.vehicle_ground_level)
        vehicle_name = (submission.vehicle_name or '').strip()

        if distance <= 0:
            raise ValidationError('distance must be positive')
        if not -180 <= longitude <= 180:
            raise ValidationError('longitude must be between -180 and 180')
        if not -90 <= latitude <= 90:
            raise ValidationError('latitude must be between -90 and 90')
        if not vehicle_name:
            raise ValidationError('vehicle_name is required')

        # the file must exist before any record can reference it
        image_ref = await self._image_store.store(
            submission.image.file,
            submission.image.filename,
            submission.image.content_type,
        )

        record = await self._repository.create(
            Pothole(
                distance=distance,
                image=image_ref,
                longitude=longitude,
                latitude=latitude,
                vehicle_name=vehicle_name,
                vehicle_ground_level=vehicle_ground_level,
                status=PotholeStatus.PENDING,
                reported_by_id=user.id,
            )
        )

        logging.info('Registered pothole %s from vehicle %r (reported by %s)', record.id, vehicle_name, user.id)
        return record

    @trace
    async def update_status(self, id: str, status: str | None, user: ActingUser) -> PotholeRecord:
        try:
            new_status = PotholeStatus(status)
        except ValueError:
            raise ValidationError('Invalid status value') from None

        record = await self._repository.update_status(id, new_status)
        logging.info('Pothole %s status set to %s by %s', id, new_status, user.id)
        return record

    @trace
    async def remove(self, id: str, user: ActingUser) -> None:
        record = await self._repository.get_by_id(id)

        try:
            await self._image_store.delete(record.image_ref)
        except OSError:
            logging.warning('Failed to delete image %s of pothole %s', record.image_ref, id, exc_info=True)

        await self._repository.delete(id)
        logging.info('Pothole %s deleted by %s', id, user.id)


def _parse_number(field: str, raw: str | float | None) -> float:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise ValidationError(f'{field} is required')

    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ValidationError(f'{field} must be a number') from None

    if not math.isfinite(value):
        raise ValidationError(f'{field} must be a number')

    return value
