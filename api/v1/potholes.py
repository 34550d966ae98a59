from typing import Annotated

from fastapi import APIRouter, Body, File, Form, Request, UploadFile

from auth import AdminUser, CurrentUser
from config import DEFAULT_PAGE_SIZE
from models.pothole_submission import ImageUpload, PotholeSubmission
from services.pothole_query_service import PotholeQueryService
from services.pothole_service import PotholeService

router = APIRouter(prefix='/potholes')


def _pothole_service(request: Request) -> PotholeService:
    return request.app.state.pothole_service


def _query_service(request: Request) -> PotholeQueryService:
    return request.app.state.pothole_query_service


@router.post('/register', status_code=201)
async def register(
    request: Request,
    user: CurrentUser,
    image: Annotated[UploadFile | None, File()] = None,
    distance: Annotated[str | None, Form()] = None,
    longitude: Annotated[str | None, Form()] = None,
    latitude: Annotated[str | None, Form()] = None,
    vehicle_name: Annotated[str | None, Form()] = None,
    vehicle_ground_level: Annotated[str | None, Form()] = None,
):
    submission = PotholeSubmission(
        distance=distance,
        longitude=longitude,
        latitude=latitude,
        vehicle_name=vehicle_name,
        vehicle_ground_level=vehicle_ground_level,
        image=(
            ImageUpload(file=image.file, filename=image.filename, content_type=image.content_type)
            if image is not None
            else None
        ),
    )

    record = await _pothole_service(request).register(submission, user)
    return {
        'success': True,
        'message': 'Pothole registered successfully',
        'data': record.to_json(),
    }


@router.get('/list')
async def list_potholes(
    request: Request,
    user: CurrentUser,
    status: str | None = None,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
):
    result = await _query_service(request).list(status, page, limit, user)
    return {
        'success': True,
        'data': [record.to_json() for record in result.items],
        'totalPages': result.total_pages,
        'currentPage': result.current_page,
        'totalRecords': result.total_records,
    }


@router.get('/{id}')
async def get_pothole(request: Request, user: CurrentUser, id: str):
    record = await _query_service(request).get(id, user)
    return {
        'success': True,
        'data': record.to_json(),
    }


@router.put('/update/{id}')
async def update_status(
    request: Request,
    user: AdminUser,
    id: str,
    pothole_status: Annotated[str | None, Body(embed=True)] = None,
):
    record = await _pothole_service(request).update_status(id, pothole_status, user)
    return {
        'success': True,
        'message': 'Pothole status updated successfully',
        'data': record.to_json(),
    }


@router.delete('/{id}')
async def delete_pothole(request: Request, user: AdminUser, id: str):
    await _pothole_service(request).remove(id, user)
    return {
        'success': True,
        'message': 'Pothole deleted successfully',
    }
