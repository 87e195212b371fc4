from fastapi import APIRouter, Depends

from laborportal.core.config import Settings, get_settings

router = APIRouter()


@router.get("/healthz")
async def healthz(settings: Settings = Depends(get_settings)) -> dict[str, str]:
    return {"status": "ok", "storage": settings.storage_backend}
