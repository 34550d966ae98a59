from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from models.pothole_status import PotholeStatus

if TYPE_CHECKING:
    from models.db.pothole import Pothole


class ReporterInfo(BaseModel):
    """Public identity of the user who filed a report."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    name: str
    email: str


class GPS(BaseModel):
    model_config = ConfigDict(frozen=True)

    longitude: float
    latitude: float


class PotholeRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    distance: float
    image_ref: str = Field(serialization_alias='image')
    gps: GPS
    vehicle_name: str
    vehicle_ground_level: float
    status: PotholeStatus = Field(serialization_alias='pothole_status')
    reported_by: ReporterInfo = Field(serialization_alias='reportedBy')
    created_at: datetime = Field(serialization_alias='createdAt')
    updated_at: datetime = Field(serialization_alias='updatedAt')

    @classmethod
    def from_db(cls, pothole: 'Pothole') -> 'PotholeRecord':
        return cls(
            id=pothole.id,
            distance=pothole.distance,
            image_ref=pothole.image,
            gps=GPS(longitude=pothole.longitude, latitude=pothole.latitude),
            vehicle_name=pothole.vehicle_name,
            vehicle_ground_level=pothole.vehicle_ground_level,
            status=pothole.status,
            reported_by=ReporterInfo.model_validate(pothole.reporter),
            created_at=pothole.created_at,
            updated_at=pothole.updated_at,
        )

    def to_json(self) -> dict:
        return self.model_dump(mode='json', by_alias=True)


class PotholePage(BaseModel):
    model_config = ConfigDict(frozen=True)

    items: tuple[PotholeRecord, ...]
    total_pages: int
    current_page: int
    total_records: int
