"""
Atlas Library API Server

FastAPI application that exposes the content library through
JSON REST endpoints.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from atlas_library import __version__
from atlas_library.api import dependencies
from atlas_library.api.routes import data, library, taxonomy
from atlas_library.config import configure_logging, load_config
from atlas_library.errors import LibraryError

logger = logging.getLogger("atlas_library.api")

config = load_config()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and bring the library up before serving."""
    configure_logging(config.logging)
    await dependencies.set_library(None, config)
    logger.info(f"Serving data from {config.storage.data_dir}, uploads in {config.storage.uploads_dir}")
    yield

    # Cleanup on shutdown
    if dependencies.library_system:
        await dependencies.library_system.close()
    await dependencies.set_library(None)


app = FastAPI(
    title="Atlas Library API",
    description="Notes, links and uploaded files with categories, tags and stats",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.server.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.exception_handler(LibraryError)
async def library_error_handler(request: Request, exc: LibraryError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        location = ".".join(str(part) for part in errors[0].get("loc", ()) if part != "body")
        message = f"{location}: {errors[0].get('msg')}" if location else errors[0].get("msg")
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


app.include_router(library.router, prefix="/api/library", tags=["Library"])
app.include_router(taxonomy.router, prefix="/api", tags=["Taxonomy"])
app.include_router(data.router, tags=["Data"])


@app.get("/api/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "ok",
        "server": "Atlas Library",
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    import uvicorn

    uvicorn.run(app, host=config.server.host, port=config.server.port)


if __name__ == "__main__":
    run()
