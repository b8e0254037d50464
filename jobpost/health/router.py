from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from jobpost.health import service as health_service
from jobpost.utils.rate_limit import rate_limit_health_info

router = APIRouter(prefix="/health", tags=["Health"])

@router.get("")
def health_root():
    return {"ok": True}

@router.get("/storage")
def health_storage():
    return JSONResponse(health_service.health_storage_info())

@router.get("/rate-limit")
def health_rate_limit(request: Request):
    return rate_limit_health_info(request)
