import logging
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from api.v1.api import router as api_v1_router
from config import (
    CORS_ALLOW_ORIGINS,
    IMAGE_CONTENT_TYPES,
    IMAGE_EXTENSIONS,
    IMAGE_MAX_FILE_SIZE,
    POSTGRES_URL,
    UPLOADS_DIR,
    UPLOADS_URL_PREFIX,
    VERSION,
)
from db import Database
from exceptions import PotholeError
from json_response import JSONResponseUTF8
from services.image_store import ImageStore
from services.pothole_query_service import PotholeQueryService
from services.pothole_repository import PotholeRepository
from services.pothole_service import PotholeService


def create_app(database: Database, image_store: ImageStore) -> FastAPI:
    @asynccontextmanager
    async def lifespan(_):
        await image_store.ensure_root()
        await database.create_all()
        logging.info('Serving images from %s as %r', image_store.root, image_store.url_prefix)
        yield
        await database.dispose()

    app = FastAPI(lifespan=lifespan, default_response_class=JSONResponseUTF8, version=VERSION)

    repository = PotholeRepository(database)
    app.state.pothole_service = PotholeService(repository, image_store)
    app.state.pothole_query_service = PotholeQueryService(repository)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ALLOW_ORIGINS,
        allow_methods=['*'],
        allow_headers=['*'],
        max_age=int(timedelta(days=1).total_seconds()),
    )

    @app.exception_handler(PotholeError)
    async def pothole_error_handler(_: Request, exc: PotholeError):
        return JSONResponseUTF8({'success': False, 'message': exc.message}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(_: Request, exc: RequestValidationError):
        return JSONResponseUTF8(
            {'success': False, 'message': 'Invalid request', 'error': str(exc.errors())},
            status_code=400,
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logging.error('Unhandled error on %s %s', request.method, request.url.path, exc_info=exc)
        return JSONResponseUTF8(
            {'success': False, 'message': 'Something went wrong!', 'error': str(exc)},
            status_code=500,
        )

    @app.get('/')
    async def index():
        return {'message': 'Pothole Detection API Server'}

    app.include_router(api_v1_router, prefix='/api/v1')
    app.mount(image_store.url_prefix, StaticFiles(directory=str(image_store.root), check_dir=False), name='uploads')
    return app


app = create_app(
    Database(
        POSTGRES_URL,
        query_cache_size=128,
        pool_size=10,
        max_overflow=-1,
    ),
    ImageStore(
        UPLOADS_DIR,
        UPLOADS_URL_PREFIX,
        content_types=IMAGE_CONTENT_TYPES,
        extensions=IMAGE_EXTENSIONS,
        max_file_size=IMAGE_MAX_FILE_SIZE,
    ),
)
