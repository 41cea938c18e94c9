"""Public REST API: versioned service exports, cases and service search."""

from typing import Optional

from fastapi import APIRouter, Depends

from phoenix.core.container import container
from phoenix.core.logging import get_logger
from phoenix.routers.responses import ResponseCode, api_response, strip_json_suffix
from phoenix.services.export import ApiExporter
from phoenix.services.phoenix import PhoenixService

logger = get_logger(__name__)
router = APIRouter(prefix="/api", tags=["api"])

EXPORT_VERSIONS = {"v1": 1, "v2": 2, "v3": 3}


def _parse_id(query: str) -> Optional[int]:
    """ASCII digits only; ``"²"`` passes ``isdigit`` but not ``int``."""
    if query.isascii() and query.isdigit():
        return int(query)
    return None


async def _resolve_service_id(phoenix: PhoenixService, query: str) -> Optional[int]:
    """Numeric queries are service ids; anything else is tried as a slug."""
    service_id = _parse_id(query)
    if service_id is not None:
        return service_id if await phoenix.service_exists(service_id) else None

    service = await phoenix.get_service_by_slug(query)
    return service["id"] if service else None


@router.get("/rest-service/{version}/{query}")
async def get_service_export(
    version: str,
    query: str,
    phoenix: PhoenixService = Depends(lambda: container.phoenix()),
    exporter: ApiExporter = Depends(lambda: container.exporter())
):
    """Service export in the v1/v2 skeleton or v3 flat shape."""
    if version not in EXPORT_VERSIONS:
        return api_response(ResponseCode.VERSION_NOT_FOUND, "Invalid Version", status_code=404)

    query = strip_json_suffix(query)
    service_id = await _resolve_service_id(phoenix, query)
    if service_id is None:
        return api_response(ResponseCode.INVALID_SERVICE, "This service does not exist!", status_code=404)

    export = await exporter.generate(service_id, EXPORT_VERSIONS[version])
    if export is None:
        return api_response(ResponseCode.INVALID_SERVICE, "This service does not exist!", status_code=404)

    return api_response(ResponseCode.REQUEST_SUCCESS, "OK", export)


@router.get("/case/{version}/{query}")
async def get_case(
    version: str,
    query: str,
    phoenix: PhoenixService = Depends(lambda: container.phoenix())
):
    """Single case by id."""
    if version != "v1":
        return api_response(ResponseCode.VERSION_NOT_FOUND, "Invalid Version", status_code=404)

    query = strip_json_suffix(query)
    case_id = _parse_id(query)
    case = await phoenix.get_case(case_id) if case_id is not None else None
    if case is None:
        return api_response(ResponseCode.INVALID_CASE, "This case does not exist!", status_code=404)

    return api_response(ResponseCode.REQUEST_SUCCESS, "OK", case)


@router.get("/search/{version}/{term}")
async def search_services(
    version: str,
    term: str,
    phoenix: PhoenixService = Depends(lambda: container.phoenix())
):
    """Services whose name contains ``term``, case-insensitively."""
    if version != "v1":
        return api_response(ResponseCode.VERSION_NOT_FOUND, "Invalid Version", status_code=404)

    services = await phoenix.search_service_by_name(term)
    return api_response(ResponseCode.REQUEST_SUCCESS, "OK", {"services": services})
