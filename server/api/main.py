# FastAPI application: routers, middleware and error envelopes

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from utils.config import Config
from utils.logger import setup_logging
from utils.exceptions import ValidationError, NotFoundError, InvalidTransitionError
from utils.response import create_error_response
from api.middleware import setup_middleware

from api.auth import auth_router
from api.accounts import accounts_router
from api.donations import donations_router
from api.reservations import reservations_router

config = Config()

setup_logging(config.config)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"{config.config['app']['name']} starting")
    logger.info(f"Environment: {config.env}")
    logger.info(f"Debug: {config.config['app']['debug']}")

    yield

    logger.info(f"{config.config['app']['name']} shutting down")


app = FastAPI(
    title=config.config['app']['name'],
    version=config.config['app']['version'],
    description=config.config['app']['description'],
    debug=config.config['app']['debug'],
    lifespan=lifespan
)

setup_middleware(app, config.config)

app.include_router(auth_router)
app.include_router(accounts_router)
app.include_router(donations_router)
app.include_router(reservations_router)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content=create_error_response(exc.detail))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies; the first problem is reported"""
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ())[1:]) or None
    return JSONResponse(
        status_code=422,
        content=create_error_response(first.get("msg", "Invalid request"), data={"field": field})
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=400,
        content=create_error_response(exc.message, data={"field": exc.field})
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content=create_error_response(exc.message))


@app.exception_handler(InvalidTransitionError)
async def invalid_transition_handler(request: Request, exc: InvalidTransitionError):
    return JSONResponse(status_code=409, content=create_error_response(exc.message))


@app.exception_handler(PermissionError)
async def permission_error_handler(request: Request, exc: PermissionError):
    return JSONResponse(status_code=403, content=create_error_response(str(exc)))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(status_code=500, content=create_error_response("Internal server error"))


@app.get("/")
async def root():
    return {
        "message": f"{config.config['app']['name']} is running",
        "version": config.config['app']['version'],
        "status": "healthy"
    }


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "version": config.config['app']['version'],
        "environment": config.env
    }


@app.get("/api/info")
async def api_info():
    return {
        "name": config.config['app']['name'],
        "version": config.config['app']['version'],
        "description": config.config['app']['description'],
        "environment": config.env,
        "endpoints": {
            "auth": "/api/auth",
            "accounts": "/api/accounts",
            "donations": "/api/donations",
            "reservations": "/api/reservations"
        }
    }


if __name__ == "__main__":
    import uvicorn

    server_config = config.config['server']

    # state lives in process memory, so a single worker
    uvicorn.run(
        "api.main:app",
        host=server_config.get('host', '127.0.0.1'),
        port=server_config.get('port', 8000),
        reload=server_config.get('reload', False),
        workers=1,
        log_level="debug" if config.config['app']['debug'] else "info"
    )
