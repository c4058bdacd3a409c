from fastapi import APIRouter

from expat_hub.api.admin import router as admin_router
from expat_hub.api.auth import router as auth_router


router = APIRouter()

router.include_router(auth_router)
router.include_router(admin_router)


@router.get("/ping")
def ping():
    return {"msg": "pong"}
