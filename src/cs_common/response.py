"""Response builders for the public supply endpoints.

Aggregators consume two shapes:
    plain  -> text/plain body holding a bare integer, e.g. "20999999999995"
    json   -> application/json body, pretty-printed

Every response carries permissive CORS headers for GET.
"""

import json
from typing import Any

from starlette.responses import Response

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET",
    "Access-Control-Allow-Headers": "Content-Type",
}


def json_response(content: Any, status_code: int = 200) -> Response:
    body = json.dumps(content, indent=4)
    return Response(
        content=body,
        status_code=status_code,
        media_type="application/json",
        headers=CORS_HEADERS,
    )


def plain_response(content: str | int, status_code: int = 200) -> Response:
    return Response(
        content=str(content),
        status_code=status_code,
        media_type="text/plain",
        headers=CORS_HEADERS,
    )


def error_body(message: str, detail: str | None = None) -> dict[str, str]:
    body = {"error": message}
    if detail is not None:
        body["message"] = detail
    return body
