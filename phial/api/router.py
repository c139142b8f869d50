"""Router Shortcut — APIRouter preconfigured with the standard body parsers.

Invariants:
    - parse_params handles urlencoded, multipart and JSON bodies; any other
      content type passes through with only query-string params
    - Body params override query-string params with the same name
    - A JSON body that is not an object is kept under the "_json" key
    - Malformed JSON raises SerializationError (400 via the error handlers)
    - Parsed params are also stored on request.state.params
"""

from typing import Any

from fastapi import APIRouter, Depends, Request

from phial.core.json_codec import decode_json

FORM_MEDIA_TYPES = frozenset({
    "application/x-www-form-urlencoded",
    "multipart/form-data",
})


def _media_type(request: Request) -> str:
    content_type = request.headers.get("content-type", "")
    return content_type.split(";", 1)[0].strip().lower()


def _is_json(media_type: str) -> bool:
    return media_type == "application/json" or media_type.endswith("+json")


async def parse_params(request: Request) -> dict[str, Any]:
    """Merge query-string and body params into one dict."""
    params: dict[str, Any] = dict(request.query_params)
    media_type = _media_type(request)

    if media_type in FORM_MEDIA_TYPES:
        form = await request.form()
        params.update(form.items())
    elif _is_json(media_type):
        body = decode_json(await request.body())
        if isinstance(body, dict):
            params.update(body)
        elif body is not None:
            params["_json"] = body

    request.state.params = params
    return params


def create_router(**kwargs: Any) -> APIRouter:
    """APIRouter whose routes all run parse_params first."""
    dependencies = list(kwargs.pop("dependencies", None) or [])
    dependencies.append(Depends(parse_params))
    return APIRouter(dependencies=dependencies, **kwargs)
