"""Map ordering errors onto HTTP responses.

Protean's own exceptions (ValidationError, ObjectNotFoundError, ...) are
handled by ``protean.integrations.fastapi.register_exception_handlers``.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ordering.exceptions import ExternalFailure, IntegrityFailure, OrderingError

logger = structlog.get_logger(__name__)


async def ordering_error_handler(request: Request, exc: OrderingError) -> JSONResponse:
    if isinstance(exc, IntegrityFailure):
        logger.error("Checkout commit failed", path=request.url.path, **exc.details)
    elif isinstance(exc, ExternalFailure):
        logger.warning("External failure", path=request.url.path, code=exc.code)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.to_dict()})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(OrderingError, ordering_error_handler)
