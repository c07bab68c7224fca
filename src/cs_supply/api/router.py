"""cs_supply public endpoints.

GET /circulating-supply               — bare integer (text/plain), or JSON with ?format=json
GET /api/circulating-supply           — same, legacy path
GET /circulating-supply/debug         — uncached computation with a step trace (JSON)

Any other method returns 405 before anything else runs. ``format=full`` is
accepted as a legacy synonym of ``format=json``.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from starlette.responses import Response

from src.cs_common.errors import InternalError, MethodNotAllowedError
from src.cs_common.response import error_body, json_response, plain_response
from src.cs_supply.api.dependencies import get_supply_service
from src.cs_supply.application.schemas import SupplyResultOut
from src.cs_supply.application.service import SupplyApplicationService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["supply"])

# Registered explicitly so non-GET requests reach the handler and get our 405 body
ANY_METHOD = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
JSON_FORMATS = {"json", "full"}
SUPPLY_PATHS = {"/circulating-supply", "/api/circulating-supply"}
DEBUG_PATH = "/circulating-supply/debug"


def method_not_allowed_response(as_json: bool) -> Response:
    err = MethodNotAllowedError()
    if as_json:
        return json_response(error_body(err.message), err.http_status)
    return plain_response(err.message, err.http_status)


@router.api_route("/circulating-supply", methods=ANY_METHOD)
@router.api_route("/api/circulating-supply", methods=ANY_METHOD)
async def circulating_supply(
    request: Request,
    service: Annotated[SupplyApplicationService, Depends(get_supply_service)],
    fmt: str | None = Query(None, alias="format"),
) -> Response:
    as_json = fmt in JSON_FORMATS
    if request.method != "GET":
        return method_not_allowed_response(as_json)

    try:
        result = await service.get_supply()
        if as_json:
            return json_response(SupplyResultOut.from_domain(result).to_json_dict())
        return plain_response(result.circulating_supply)
    except Exception as exc:
        logger.exception("Failed to build circulating supply response")
        err = InternalError()
        if as_json:
            return json_response(error_body(err.message, str(exc)), err.http_status)
        # Plain consumers expect a bare number, never an error text
        return plain_response("0", err.http_status)


@router.api_route(DEBUG_PATH, methods=ANY_METHOD)
async def circulating_supply_debug(
    request: Request,
    service: Annotated[SupplyApplicationService, Depends(get_supply_service)],
) -> Response:
    if request.method != "GET":
        return method_not_allowed_response(as_json=True)
    report = await service.debug_supply()
    return json_response(report.model_dump(exclude_none=True))
