"""
FastAPI Application Entry Point
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from homequote.core.config import settings
from homequote.api.v1.router import api_router
from homequote.api.v1.endpoints import auth
from homequote.database.connection import DatabasePool
from homequote.database.session import init_session_factory, init_db
from homequote.utils.exceptions import PartnerConfigurationError
from homequote.utils.logging import get_logger, app_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup and shutdown.
    Initializes database pool on startup and closes it on shutdown.
    """
    # Startup
    app_logger.info("🚀 [bold green]Initializing application...[/bold green]")
    try:
        app_logger.info("📊 [cyan]Initializing database connection pool...[/cyan]")
        DatabasePool.initialize()
        init_session_factory()
        if settings.database.is_sqlite:
            init_db()
        app_logger.info("✅ [bold green]Application initialized successfully[/bold green]")
    except Exception as e:
        app_logger.error(f"❌ [bold red]Failed to initialize application:[/bold red] {e}")
        raise

    yield

    # Shutdown
    app_logger.info("🛑 [yellow]Shutting down application...[/yellow]")
    try:
        app_logger.info("📊 [cyan]Closing database connection pool...[/cyan]")
        DatabasePool.close()
        app_logger.info("✅ [bold green]Application shut down successfully[/bold green]")
    except Exception as e:
        app_logger.error(f"❌ [bold red]Error during application shutdown:[/bold red] {e}")


app = FastAPI(
    title=settings.project_name,
    version=settings.version,
    description=settings.description,
    openapi_url=f"{settings.api_prefix}/openapi.json",
    lifespan=lifespan,
)

# CORS middleware
if settings.backend_cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin) for origin in settings.backend_cors_origins],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# Every error body is {"error": "<message>"}

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else first.get("msg")
    else:
        message = "Invalid request"
    logger.debug(f"[dim]Rejected request to {request.url.path}:[/dim] {message}")
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(PartnerConfigurationError)
async def partner_configuration_handler(request: Request, exc: PartnerConfigurationError):
    logger.error(f"[bold red]Partner configuration error:[/bold red] {exc}")
    return JSONResponse(status_code=500, content={"error": "Partner configuration error"})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"[bold red]Unhandled error on {request.method} {request.url.path}:[/bold red] {exc!r}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# Include API routers
app.include_router(api_router, prefix=settings.api_prefix)
app.include_router(auth.router, prefix="/auth", tags=["auth"])


@app.get("/")
async def root():
    """Root endpoint"""
    return {"message": "API is running", "version": settings.version}


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    try:
        pool_status = DatabasePool.get_pool_status()
        return {
            "status": "healthy",
            "database": {
                "pool_initialized": pool_status["initialized"],
                "pool_size": pool_status["size"],
                "connections_checked_out": pool_status["checked_out"],
            }
        }
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return {"status": "unhealthy", "error": str(e)}
