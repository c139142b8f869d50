"""Response Writers — one-call helpers that build complete Starlette responses.

Invariants:
    - status accepts an int, an HTTPStatus, or its name ("ok", "not_found", ...)
    - Unknown status names and codes outside 100-599 raise InvalidArgumentError
    - file()/download() answer an empty 404 when the path is not a regular file
    - JSON bodies go through jsonable_encoder, then core/json_codec.encode_json

Design Decisions:
    - Functions return Response objects; route handlers return them unchanged
    - File responses stream via FileResponse; headers are set before the first byte
"""

import mimetypes
from collections.abc import Iterable, Mapping
from http import HTTPStatus
from pathlib import Path
from typing import Any, Union

from fastapi.encoders import jsonable_encoder
from fastapi.responses import (
    FileResponse, HTMLResponse, JSONResponse, PlainTextResponse,
    RedirectResponse, Response,
)

from phial.config import get_settings
from phial.core.errors import ErrorContext, InvalidArgumentError, SerializationError
from phial.core.json_codec import encode_json

StatusLike = Union[int, HTTPStatus, str]
HeadersLike = Union[Mapping[str, str], Iterable[tuple[str, str]], None]

DEFAULT_MEDIA_TYPE = "application/octet-stream"


class PhialJSONResponse(JSONResponse):
    """JSONResponse rendered with encode_json (compact, no NaN)."""

    def render(self, content: Any) -> bytes:
        return encode_json(content).encode("utf-8")


def resolve_status(status: StatusLike) -> int:
    """Turn an int, HTTPStatus or status name into a numeric status code."""
    code: int | None = None
    if isinstance(status, int) and not isinstance(status, bool):
        code = int(status)
    elif isinstance(status, str):
        name = status.strip()
        if name.isdigit():
            code = int(name)
        else:
            try:
                code = HTTPStatus[name.upper()].value
            except KeyError:
                code = None
    if code is None or not 100 <= code <= 599:
        raise InvalidArgumentError(
            f"Unknown HTTP status {status!r}", field="status",
            context=ErrorContext(debug_info={"status": repr(status)}),
        )
    return code


def json(status: StatusLike, data: Any, headers: HeadersLike = None) -> Response:
    """application/json response."""
    try:
        content = jsonable_encoder(data)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Response body cannot be encoded: {e}") from e
    return PhialJSONResponse(
        content, status_code=resolve_status(status), headers=_headers(headers),
    )


def html(status: StatusLike, data: Any, headers: HeadersLike = None) -> Response:
    """text/html response."""
    return HTMLResponse(
        str(data), status_code=resolve_status(status), headers=_headers(headers),
    )


def text(status: StatusLike, data: Any, headers: HeadersLike = None) -> Response:
    """text/plain response."""
    return PlainTextResponse(
        str(data), status_code=resolve_status(status), headers=_headers(headers),
    )


def file(path: str | Path, headers: HeadersLike = None) -> Response:
    """Send a file inline; empty 404 when it does not exist."""
    target = Path(path)
    if not target.is_file():
        return status(HTTPStatus.NOT_FOUND)
    return FileResponse(
        target,
        status_code=HTTPStatus.OK,
        headers=_file_headers(target, headers),
        media_type=_media_type(target),
    )


def download(path: str | Path, headers: HeadersLike = None) -> Response:
    """Send a file as an attachment; empty 404 when it does not exist."""
    target = Path(path)
    if not target.is_file():
        return status(HTTPStatus.NOT_FOUND)
    return FileResponse(
        target,
        status_code=HTTPStatus.OK,
        headers=_file_headers(target, headers),
        media_type=_media_type(target),
        filename=target.name,
        content_disposition_type="attachment",
    )


def status(code: StatusLike, headers: HeadersLike = None) -> Response:
    """Status-only response with an empty body."""
    return Response(
        content=b"", status_code=resolve_status(code), headers=_headers(headers),
    )


def redirect(url: str, status: StatusLike = HTTPStatus.FOUND, headers: HeadersLike = None) -> Response:
    """Redirect to url (302 unless told otherwise)."""
    return RedirectResponse(
        url, status_code=resolve_status(status), headers=_headers(headers),
    )


def _headers(headers: HeadersLike) -> dict[str, str] | None:
    if headers is None:
        return None
    items = headers.items() if isinstance(headers, Mapping) else headers
    return {str(k).lower(): str(v) for k, v in items}


def _file_headers(target: Path, headers: HeadersLike) -> dict[str, str]:
    merged = _headers(headers) or {}
    merged.update({
        "content-length": str(target.stat().st_size),
        "content-transfer-encoding": "binary",
        "cache-control": get_settings().file_cache_control,
    })
    return merged


def _media_type(target: Path) -> str:
    media_type, _ = mimetypes.guess_type(target.name)
    return media_type or DEFAULT_MEDIA_TYPE
