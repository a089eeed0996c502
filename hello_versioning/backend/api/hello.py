"""
Hello Endpoints.

One path, several API versions. The version is read from the request
(header or query parameter, per server.yaml) and selects the handler.
A version with no handler answers 404, the same as an unmatched route.

Endpoints:
- /hello/greeting/{name}: plain-text greeting
"""

from collections.abc import Callable

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from hello_versioning.core.config import get_app_config
from hello_versioning.core.exceptions import VersionNotFoundError
from hello_versioning.core.logging import get_logger, log_with_source
from hello_versioning.core.versioning import resolve_version

router = APIRouter()
logger = get_logger(__name__)


def greet_v1(name: str) -> str:
    return f"Hello, {name}"


def greet_v2(name: str) -> str:
    return f"Hello 2, {name}"


GREETING_HANDLERS: dict[str, Callable[[str], str]] = {
    "1": greet_v1,
    "2": greet_v2,
}


def get_api_version(request: Request) -> str | None:
    """FastAPI dependency resolving the requested API version."""
    settings = get_app_config().server.versioning
    return resolve_version(request.headers, request.query_params, settings)


@router.get("/greeting/{name}", response_class=PlainTextResponse)
async def greeting(name: str, version: str | None = Depends(get_api_version)) -> str:
    """Greet ``name`` in the style of the requested API version."""
    handler = GREETING_HANDLERS.get(version) if version is not None else None
    if handler is None:
        raise VersionNotFoundError(version)

    log_with_source(logger, "server", "debug", "Greeting served", version=version)
    return handler(name)
