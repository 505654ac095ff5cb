"""HTTP error mapping for the Reviews API.

The framework's handlers cover validation (400) and not-found (404)
errors, including the domain's subclasses of them. Conflicts and
authorization failures are the domain's own kinds and are mapped here.
A version conflict the framework raises itself (at commit, after its
retries) is reported like ``StaleWrite``.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError
from protean.integrations.fastapi import register_exception_handlers

from reviews.errors import ConflictError, ForbiddenError, InvariantRepairNeeded


def _error_response(status_code: int):
    async def handler(request: Request, exc) -> JSONResponse:
        return JSONResponse(status_code=status_code, content={"error": exc.messages})

    return handler


async def _version_conflict(request: Request, exc: ExpectedVersionError) -> JSONResponse:
    return JSONResponse(status_code=409, content={"error": {"_entity": [str(exc)]}})


def register_error_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)
    app.add_exception_handler(ConflictError, _error_response(409))
    app.add_exception_handler(InvariantRepairNeeded, _error_response(409))
    app.add_exception_handler(ForbiddenError, _error_response(403))
    app.add_exception_handler(ExpectedVersionError, _version_conflict)
