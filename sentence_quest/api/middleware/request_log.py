"""
Per-request correlation and access logging.
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from sentence_quest.logging_config import get_logger, player_id_var, request_id_var

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLogMiddleware(BaseHTTPMiddleware):
    """
    Tag each request with an id and log one line when it finishes.

    The client's X-Request-ID is reused when sent, so game client and
    service logs line up. Player context starts empty and is bound by the
    engines once the player is known.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        request_token = request_id_var.set(request_id)
        player_token = player_id_var.set(None)

        start = time.perf_counter()
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            logger.info(
                "%s %s -> %d",
                request.method,
                request.url.path,
                response.status_code,
                extra={"duration_ms": round((time.perf_counter() - start) * 1000, 1)},
            )
            return response
        finally:
            player_id_var.reset(player_token)
            request_id_var.reset(request_token)
