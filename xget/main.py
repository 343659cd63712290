from contextlib import asynccontextmanager

import httpx
import structlog
import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from xget.deps.upstream import create_http_client
from xget.packages.registry_proxy import MalformedChallenge
from xget.routes import docker_proxy, health
from xget.settings import settings
from xget.utils.logging import setup_logger
from xget.utils.response_helpers import docker_error_response
from xget.utils.sentry import init_sentry

logger = structlog.stdlib.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.http_client = create_http_client()

    yield

    await app.state.http_client.aclose()


init_sentry()
app = FastAPI(lifespan=lifespan)
setup_logger(app)


@app.exception_handler(MalformedChallenge)
async def malformed_challenge_handler(request: Request, exc: MalformedChallenge):
    return docker_error_response(
        status_code=status.HTTP_502_BAD_GATEWAY,
        error_code="UNAUTHORIZED",
        message="upstream registry sent a malformed authentication challenge",
        detail=exc.header,
    )


@app.exception_handler(httpx.HTTPError)
async def upstream_error_handler(request: Request, exc: httpx.HTTPError):
    logger.error("Upstream registry unreachable", error=str(exc))
    return docker_error_response(
        status_code=status.HTTP_502_BAD_GATEWAY,
        error_code="UNAVAILABLE",
        message="upstream registry unavailable",
        detail=str(exc),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"title": "Validation error", "description": exc.errors()},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"title": "Internal Server Error", "description": str(exc)},
    )


app.include_router(health.router)
app.include_router(docker_proxy.router)


def run():
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)
