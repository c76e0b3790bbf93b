from fastapi import APIRouter

from loanflow.api.v1.endpoints.applications import router as applications_router
from loanflow.api.v1.endpoints.tags import router as tags_router

router = APIRouter()


@router.get("/ping")
async def ping():
    return {"ping": "pong"}


router.include_router(applications_router)
router.include_router(tags_router)
