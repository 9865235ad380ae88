import math
from typing import Optional

from ..schemas.common import Device, DeviceFilters, PageInfo


def parse_list_param(value: Optional[str]) -> Optional[list[str]]:
    """Split a comma separated query value; blank input means no constraint."""
    if not value:
        return None
    items = [v.strip() for v in value.split(",") if v.strip()]
    return items or None


def _search_fields(device: Device) -> list[str]:
    fields = [device.name, device.id]
    location = device.metadata.location
    if location is not None and location.address:
        fields.append(location.address)
    if device.metadata.serial_number:
        fields.append(device.metadata.serial_number)
    return fields


def matches_filters(device: Device, filters: DeviceFilters) -> bool:
    if filters.status and device.status not in filters.status:
        return False
    if filters.type and device.type not in filters.type:
        return False
    if filters.search:
        query = filters.search.lower()
        if not any(query in field.lower() for field in _search_fields(device)):
            return False
    return True


def paginate(items: list, page: int, page_size: int) -> tuple[list, PageInfo]:
    page = max(1, page)
    page_size = max(1, page_size)
    total = len(items)
    start = (page - 1) * page_size
    info = PageInfo(page=page, page_size=page_size, total=total, total_pages=math.ceil(total / page_size))
    return items[start:start + page_size], info
