from dataclasses import dataclass
from typing import BinaryIO


@dataclass(frozen=True, slots=True)
class ImageUpload:
    file: BinaryIO | bytes
    filename: str | None
    content_type: str | None


@dataclass(frozen=True, slots=True, kw_only=True)
class PotholeSubmission:
    """
    Registration form as received from the vehicle, numbers not yet parsed.
    """

    distance: str | float | None
    longitude: str | float | None
    latitude: str | float | None
    vehicle_name: str | None
    vehicle_ground_level: str | float | None
    image: ImageUpload | None = None
