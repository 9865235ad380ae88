import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from ..core.config import settings
from ..data.store import DeviceStore
from ..schemas.common import (
    DeviceCreate,
    DeviceFilters,
    DeviceListResponse,
    DeviceResponse,
    SummaryResponse,
)
from ..services.filters import paginate, parse_list_param

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/collection", tags=["devices"])


def get_store(request: Request) -> DeviceStore:
    return request.app.state.store


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.get("", response_model=DeviceListResponse, response_model_exclude_none=True)
def list_devices(
    status: Optional[str] = None,
    type: Optional[str] = None,
    search: Optional[str] = None,
    page: Optional[int] = Query(None, ge=1),
    page_size: Optional[int] = Query(None, ge=1),
    store: DeviceStore = Depends(get_store),
):
    try:
        filters = DeviceFilters(status=parse_list_param(status), type=parse_list_param(type), search=search or None)
        devices = store.filter(filters)
        pagination = None
        if page is not None or page_size is not None:
            size = min(page_size or settings.PAGE_SIZE, settings.MAX_PAGE_SIZE)
            devices, pagination = paginate(devices, page or 1, size)
        return DeviceListResponse(data=devices, message="Devices fetched successfully", pagination=pagination)
    except Exception:
        logger.exception("Error fetching devices")
        return _error(500, "Failed to fetch devices")


@router.post("", response_model=DeviceResponse, response_model_exclude_none=True, status_code=201)
def create_device(payload: DeviceCreate, store: DeviceStore = Depends(get_store)):
    try:
        device = store.append(payload)
        return DeviceResponse(data=device, message="Device created successfully")
    except Exception:
        logger.exception("Error creating device")
        return _error(500, "Failed to create device")


@router.get("/summary", response_model=SummaryResponse)
def fleet_summary(store: DeviceStore = Depends(get_store)):
    try:
        return SummaryResponse(data=store.summary(), message="Summary fetched successfully")
    except Exception:
        logger.exception("Error building fleet summary")
        return _error(500, "Failed to fetch summary")


@router.get("/{device_id}", response_model=DeviceResponse, response_model_exclude_none=True)
def get_device(device_id: str, store: DeviceStore = Depends(get_store)):
    try:
        device = store.get(device_id)
    except Exception:
        logger.exception("Error fetching device %s", device_id)
        return _error(500, "Failed to fetch device")
    if device is None:
        return _error(404, "Device not found")
    return DeviceResponse(data=device, message="Device fetched successfully")
