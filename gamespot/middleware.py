"""
Middleware
----------
"""

from http import HTTPStatus

from aiohttp.abc import Request
from aiohttp.web_middlewares import middleware

from gamespot import logger
from gamespot.config import api_root
from gamespot.serializer.decorators import error_response
from gamespot.service.errors import StorageError


@middleware
async def request_logging_middleware(request: Request, handler):
    """Logs every request made to the api."""
    if request.path.startswith(api_root):
        logger.info("API Request: %s %s", request.method, request.path)
    return await handler(request)


@middleware
async def storage_error_middleware(request: Request, handler):
    """
    Turns a failure of the database into a JSON error, rather
    than the plain text page aiohttp would otherwise show.
    """
    try:
        return await handler(request)
    except StorageError as error:
        logger.error("Storage failure on %s %s: %s", request.method, request.path, error.message)
        return error_response(HTTPStatus.INTERNAL_SERVER_ERROR, error.message)


middlewares = [request_logging_middleware, storage_error_middleware]
