"""
FastAPI application entry point.
Main application setup and configuration.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
from pathlib import Path
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from realty.config import settings
from realty.database import Database
from realty.routers import auth_router, listings_router, public_router, api_router
from realty.utils.exceptions import APIException, LoginRequiredError, CSRFError
from realty.services.error_handler import ErrorHandlerService
from realty.middleware.csrf import CSRFMiddleware
from realty.templating import render

# Configure logging
logging.basicConfig(level=logging.DEBUG if settings.debug else logging.INFO)
logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Opens the store handle at startup and disposes it at shutdown.
    """
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")

    # A handle set beforehand (tests) is left alone
    owns_database = getattr(app.state, "database", None) is None
    if owns_database:
        database = Database(settings.database_url, echo=settings.debug)
        database.connect()
        app.state.database = database

        if not await database.ping():
            logger.error("Failed to connect to database on startup")

    yield

    logger.info("Shutting down application")
    if owns_database:
        await app.state.database.dispose()
        app.state.database = None


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Property listings published by their owners, with buyer inquiries.

    ## Features

    * **Listings**: Owners draft a listing, attach one image to publish it, then edit or unpublish it
    * **Inquiries**: Signed-in users message the owner of a published listing
    * **Accounts**: Registration with email confirmation, cookie sessions and password recovery
    * **Map feed**: JSON feed of published listings
    """,
    docs_url="/docs" if not settings.is_production else None,
    redoc_url=None,
    lifespan=lifespan,
)

app.add_middleware(CSRFMiddleware, secure=settings.is_production)

Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
app.mount("/uploads", StaticFiles(directory=settings.upload_dir), name="uploads")

app.include_router(auth_router)
app.include_router(listings_router)
app.include_router(public_router)
app.include_router(api_router)


# Global exception handlers using ErrorHandlerService
@app.exception_handler(LoginRequiredError)
async def login_required_handler(request: Request, exc: LoginRequiredError):
    """Send anonymous visitors of protected pages to the sign-in form."""
    if ErrorHandlerService.wants_json(request):
        return ErrorHandlerService.handle_api_exception(exc, request)
    return RedirectResponse("/auth/login", status_code=status.HTTP_303_SEE_OTHER)


@app.exception_handler(CSRFError)
async def csrf_exception_handler(request: Request, exc: CSRFError):
    logger.warning(f"CSRF check failed for {request.method} {request.url.path}")
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorHandlerService.format_error_response(exc.error_code, exc.detail),
    )


@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    """Handle custom API exceptions with structured error responses."""
    return ErrorHandlerService.handle_api_exception(exc, request)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return ErrorHandlerService.handle_validation_error(exc, request)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Unknown pages render the not-found page for browsers."""
    if exc.status_code == status.HTTP_404_NOT_FOUND and not ErrorHandlerService.wants_json(request):
        return render(request, "404.html", {"title": "Not found"}, status_code=status.HTTP_404_NOT_FOUND)
    return ErrorHandlerService.handle_http_exception(exc, request)


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    """Handle database errors with appropriate error responses."""
    return ErrorHandlerService.handle_database_error(exc, request)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions with secure error responses."""
    return ErrorHandlerService.handle_unexpected_error(exc, request)


@app.get("/health", tags=["Health"])
async def health_check(request: Request):
    """
    Health check endpoint with database connectivity test.
    """
    if not await request.app.state.database.ping():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "database": "disconnected"},
        )

    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "database": "connected"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "realty.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
