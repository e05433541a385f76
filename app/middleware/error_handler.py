"""
Global error handling middleware.

Errors that escape a route are turned into JSON bodies of the form
``{"error": ..., "detail": ...}``. Farm-records failures keep a 404
from the upstream service and otherwise surface as 502.
"""
import logging
import time
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Callable

from app.infrastructure.records_api_client import RecordsAPIError


logger = logging.getLogger(__name__)


def _error_response(status_code: int, error: str, detail: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "detail": detail})


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Catches unhandled exceptions, returns consistent error responses and
    logs the duration of every request.
    """

    async def dispatch(self, request: Request, call_next: Callable):
        started = time.perf_counter()
        context = {"path": request.url.path, "method": request.method}

        try:
            response = await call_next(request)

        except RecordsAPIError as e:
            upstream_status = (
                status.HTTP_404_NOT_FOUND
                if e.status_code == status.HTTP_404_NOT_FOUND
                else status.HTTP_502_BAD_GATEWAY
            )
            logger.error(f"Farm-records API error: {e.message}",
                         extra={**context, "status_code": e.status_code})
            return _error_response(upstream_status, "Farm-records API error", e.message)

        except ValueError as e:
            logger.warning(f"Validation error: {e}", extra=context)
            return _error_response(status.HTTP_400_BAD_REQUEST, "Invalid request", str(e))

        except Exception as e:
            logger.exception(f"Unhandled exception: {e}", extra=context)
            return _error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "Internal server error",
                "An unexpected error occurred",
            )

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.debug(f"{request.method} {request.url.path} -> {response.status_code} "
                     f"({elapsed_ms:.1f} ms)")
        return response
