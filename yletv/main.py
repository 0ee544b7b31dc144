from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request

from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from yletv.config import setup_logging
from yletv.dependencies import (
    get_catalog_scheduler,
    get_catalog_service,
    get_route_controller,
)

from yletv.routers import main_router


setup_logging()
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events"""
    logger.info("="*60)
    logger.info("Starting YLE Live...")
    logger.info("="*60)

    scheduler = get_catalog_scheduler()

    try:
        # Initial catalog; an empty catalog leaves nothing to route to
        logger.info("Fetching initial catalog...")
        result = await get_catalog_service().refresh()
        logger.info(f"Initial catalog loaded: {len(result.channels)} channels, {len(result.programs)} programs")

        logger.info("Routing to default channel...")
        await get_route_controller().start()

        logger.info("Starting scheduler...")
        scheduler.start()
        logger.info("Scheduler started successfully")

        logger.info("="*60)
        logger.info("YLE Live started successfully")
        logger.info("="*60)
    except Exception as e:
        logger.error("="*60)
        logger.error(f"Failed to start YLE Live: {e}", exc_info=True)
        logger.error("="*60)
        raise

    yield

    logger.info("="*60)
    logger.info("Shutting down YLE Live...")
    logger.info("="*60)

    try:
        scheduler.shutdown()
        logger.info("Scheduler stopped")
    except Exception as e:
        logger.error(f"Error during scheduler shutdown: {e}", exc_info=True)

    logger.info("="*60)
    logger.info("YLE Live stopped")
    logger.info("="*60)


app = FastAPI(
    title="YLE Live",
    version="0.1.0",
    lifespan=lifespan
)

app.include_router(main_router)

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Log validation errors with details"""
    logger.error(f"Validation error for {request.method} {request.url.path}")
    logger.error(f"Validation details: {exc.errors()}")

    errors = []
    for error in exc.errors():
        error_dict = {
            "type": error.get("type"),
            "loc": error.get("loc"),
            "msg": error.get("msg"),
            "input": str(error.get("input", ""))[:100]
        }
        errors.append(error_dict)

    return JSONResponse(
        status_code=422,
        content={
            "detail": errors
        }
    )
