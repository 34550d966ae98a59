from fastapi import APIRouter

import api.v1.potholes as potholes

router = APIRouter()
router.include_router(potholes.router)
