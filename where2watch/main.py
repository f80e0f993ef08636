import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from where2watch.api.routes_api import router as api_router
from where2watch.core.auth import AdminPinMiddleware
from where2watch.core.config import get_settings
from where2watch.core.database import create_db_and_tables
from where2watch.core.errors import NotFoundError, RepositoryError, ValidationError

load_dotenv()

logging.basicConfig(
    level=logging.DEBUG if get_settings().debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI):
    """Application lifespan context manager."""
    create_db_and_tables()
    try:
        yield
    finally:
        # Close the TMDB HTTP session
        import tmdbsimple as tmdb

        if tmdb.REQUESTS_SESSION is not None:
            try:
                tmdb.REQUESTS_SESSION.close()
            except Exception as e:
                logger.error(f"Error closing TMDB session: {e}")


app = FastAPI(
    title="Where 2 Watch",
    description="Movie and TV catalog with TMDB import and where-to-watch links",
    version="0.1.0",
    lifespan=app_lifespan,
)

app.add_middleware(AdminPinMiddleware)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(RepositoryError)
async def repository_error_handler(request: Request, exc: RepositoryError):
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": str(exc)})


# Include routers
app.include_router(api_router, prefix="/api")
