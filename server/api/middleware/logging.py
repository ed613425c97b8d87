# Request logging middleware

import time
import uuid
import logging
from fastapi import FastAPI, Request
from typing import Dict, Any

logger = logging.getLogger(__name__)


def setup_logging_middleware(app: FastAPI, config: Dict[str, Any]):
    """
    Log every request with a short request id, echoed in X-Request-ID.

    Args:
        app: FastAPI application
        config: configuration dict
    """

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = str(uuid.uuid4())[:8]
        start_time = time.time()

        logger.info(
            f"[{request_id}] {request.method} {request.url.path} - "
            f"Client: {request.client.host if request.client else 'unknown'}"
        )

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(f"[{request_id}] ERROR - {str(e)} - Time: {process_time:.3f}s")
            raise

        process_time = time.time() - start_time
        logger.info(f"[{request_id}] {response.status_code} - Time: {process_time:.3f}s")

        response.headers["X-Request-ID"] = request_id
        return response
