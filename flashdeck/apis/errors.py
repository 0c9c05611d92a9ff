"""Discriminated action results and the exception handlers that produce them."""

from __future__ import annotations

from typing import Literal, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from flashdeck.core.errors import FlashdeckError
from flashdeck.core.logging import get_logger

logger = get_logger(__name__)


class ActionResult(BaseModel):
    status: Literal["success", "error"]
    message: Optional[str] = None
    errors: Optional[dict[str, list[str]]] = None


def field_errors(exc: RequestValidationError) -> dict[str, list[str]]:
    """Flatten pydantic errors to ``{field: [messages]}``."""
    out: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        field = ".".join(loc) or "__root__"
        out.setdefault(field, []).append(err.get("msg", "Invalid value"))
    return out


def _error(status_code: int, message: str, errors=None) -> JSONResponse:
    body = ActionResult(status="error", message=message, errors=errors)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = field_errors(exc)
    logger.info(f"Validation errors on {request.url.path}: {errors}")
    return _error(422, "Invalid input.", errors)


async def flashdeck_error_handler(request: Request, exc: FlashdeckError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    return _error(exc.status_code, exc.message)


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(FlashdeckError, flashdeck_error_handler)
