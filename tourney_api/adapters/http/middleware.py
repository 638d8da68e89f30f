"""aiohttp middlewares: error mapping and request metrics."""

import time
from typing import Dict, Type

import structlog
from aiohttp import web
from pydantic import ValidationError as SchemaValidationError

from tourney_api.adapters.observability import get_metrics_provider
from tourney_api.core.errors import (
    TourneyAPIError,
    ValidationError,
    NotFoundError,
    UnauthorizedError,
    ConflictError,
)

logger = structlog.get_logger()

ERROR_STATUS: Dict[Type[TourneyAPIError], int] = {
    ValidationError: 400,
    ConflictError: 400,
    UnauthorizedError: 401,
    NotFoundError: 404,
}


def error_response(message: str, status: int) -> web.Response:
    return web.json_response({"message": message}, status=status)


def status_for(error: TourneyAPIError) -> int:
    """HTTP status of a domain error, following its class hierarchy."""
    for error_class in type(error).__mro__:
        if error_class in ERROR_STATUS:
            return ERROR_STATUS[error_class]
    return 500


def _schema_error_message(error: SchemaValidationError) -> str:
    details = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        details.append(f"{location}: {item['msg']}" if location else item["msg"])
    return "Invalid request: " + "; ".join(details)


@web.middleware
async def error_middleware(request: web.Request, handler) -> web.StreamResponse:
    """Turn domain and validation errors into ``{"message": ...}`` responses."""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except SchemaValidationError as e:
        return error_response(_schema_error_message(e), 400)
    except TourneyAPIError as e:
        return error_response(e.message, status_for(e))
    except Exception:
        logger.exception(
            "Unhandled error while serving request",
            method=request.method,
            path=request.path,
        )
        return error_response("Internal server error", 500)


@web.middleware
async def metrics_middleware(request: web.Request, handler) -> web.StreamResponse:
    """Record request count and duration per route."""
    metrics = get_metrics_provider()
    if metrics is None:
        return await handler(request)

    start_time = time.time()
    status = 500
    try:
        response = await handler(request)
        status = response.status
        return response
    except web.HTTPException as e:
        status = e.status
        raise
    finally:
        resource = request.match_info.route.resource
        route = resource.canonical if resource is not None else "unmatched"
        metrics.record_http_request(request.method, route, status, time.time() - start_time)
