# Security middleware: response headers and request size limit

import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from typing import Dict, Any

from utils.response import create_error_response

logger = logging.getLogger(__name__)

# donation photos arrive inline as base64
DEFAULT_MAX_REQUEST_SIZE = 10 * 1024 * 1024


def setup_security_middleware(app: FastAPI, config: Dict[str, Any]):
    """
    Add security headers and reject oversized bodies.

    Args:
        app: FastAPI application
        config: configuration dict
    """
    security_config = config.get('security', {})

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response

    max_request_size = security_config.get('max_request_size', DEFAULT_MAX_REQUEST_SIZE)

    @app.middleware("http")
    async def limit_request_size(request: Request, call_next):
        content_length = request.headers.get('content-length')
        if content_length and content_length.isdigit() and int(content_length) > max_request_size:
            logger.warning(f"Request size {content_length} exceeds limit {max_request_size}")
            return JSONResponse(status_code=413, content=create_error_response("Request entity too large"))

        return await call_next(request)
