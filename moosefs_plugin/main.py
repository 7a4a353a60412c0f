import logging
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request

from .api import volume_driver
from .dependencies import get_settings, get_volume_manager
from .logging_config import setup_logging

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    setup_logging(settings)

    logging.info("Starting up MooseFS volume plugin")
    logging.info(f"MooseFS master: {settings.host}:{settings.port}, remote path: {settings.remote_path}")
    logging.info(f"Container volume path: {settings.container_volume_path}")
    logging.info(f"Host volume path: {settings.host_volume_path}")
    if settings.root_volume:
        logging.info(f"Root volume: {settings.root_volume}")

    # The remote root is mounted lazily by the first VolumeDriver call
    volume_manager = get_volume_manager()

    yield

    # Shutdown (uvicorn runs this on SIGTERM / SIGINT)
    await volume_manager.shutdown()
    logging.info("Server shutdown complete")


app = FastAPI(
    title="MooseFS Volume Plugin",
    description="Docker volume plugin backed by a MooseFS filesystem",
    version="0.1.0",
    lifespan=lifespan,
)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    logging.debug(
        f"Incoming request: {request.method} {request.url.path}",
        extra={
            "operation": "plugin_request",
            "method": request.method,
            "path": request.url.path,
        },
    )

    try:
        response = await call_next(request)
    except Exception as e:
        # Anything the plugin error handlers did not catch is still answered with Err
        return await volume_driver.unexpected_error_handler(request, e)

    logging.debug(
        f"Response: {response.status_code}",
        extra={
            "operation": "plugin_response",
            "status_code": response.status_code,
            "path": request.url.path,
        },
    )
    return response


volume_driver.register_error_handlers(app)
app.include_router(volume_driver.plugin_router)
app.include_router(volume_driver.router)


def main() -> None:
    socket_path = Path(settings.socket_path)
    socket_path.parent.mkdir(parents=True, exist_ok=True)

    # A socket that cannot be bound is the one fatal error: uvicorn exits non-zero
    uvicorn.run(
        app,
        uds=str(socket_path),
        log_level=settings.log_level.lower(),
        log_config=None,
    )


if __name__ == "__main__":
    main()
