"""Map request validation failures onto the simulator's configuration errors."""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


def field_errors(exc: RequestValidationError) -> dict[str, str]:
    """Return one message per offending field, keyed by its camelCase name."""

    errors: dict[str, str] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        field = ".".join(loc) or "body"
        # Messages raised by our validators keep their original wording.
        cause = (error.get("ctx") or {}).get("error")
        errors.setdefault(field, str(cause) if cause is not None else error.get("msg", "Invalid value"))
    return errors


async def request_validation_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": {
                "stage": "config",
                "message": "Invalid simulation parameters",
                "errors": field_errors(exc),
            }
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, request_validation_handler)


__all__ = ["field_errors", "register_exception_handlers", "request_validation_handler"]
