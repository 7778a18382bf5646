from __future__ import annotations

from typing import Callable, Dict, Tuple

from fastapi import FastAPI, Request, Response
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

GREETING = "Hello from docker container!"


# === Handlers ===


def greet() -> PlainTextResponse:
    return PlainTextResponse(GREETING)


async def not_found(request: Request, exc: Exception) -> Response:
    # A known path with another method has no route either.
    return await http_exception_handler(request, StarletteHTTPException(status_code=404))


# === Routing ===


ROUTES: Dict[Tuple[str, str], Callable[[], Response]] = {
    ("GET", "/"): greet,
}


def create_app() -> FastAPI:
    app = FastAPI(
        title="Greeter",
        version="1.0.0",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        exception_handlers={405: not_found},
    )
    for (method, path), endpoint in ROUTES.items():
        app.add_api_route(
            path,
            endpoint,
            methods=[method],
            response_class=PlainTextResponse,
            include_in_schema=False,
        )
    return app


app = create_app()
