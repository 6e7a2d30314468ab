# FastAPI application factory
# Wires configuration, the Docmost client and the dispatcher into the HTTP surfaces

import logging
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .api import rpc, tool_call, well_known
from .api.dependencies import get_dispatcher
from .api.models import BannerResponse, HealthResponse
from .config import Settings
from .services.dispatcher import ToolDispatcher
from .services.docmost_client import DocmostClient
from .services.tool_registry import ToolRegistry

_log_formatter = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
logger = logging.getLogger(__name__)

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, Mcp-Session-Id",
}


def configure_logging(settings: Settings) -> None:
    """Console logging plus an optional rotating file."""
    logging.basicConfig(level=settings.log_level, format=_log_formatter)
    logging.getLogger().setLevel(settings.log_level)
    if settings.log_file:
        file_handler = RotatingFileHandler(settings.log_file, maxBytes=2_000_000, backupCount=3)
        file_handler.setLevel(settings.log_level)
        file_handler.setFormatter(logging.Formatter(_log_formatter))
        logging.getLogger().addHandler(file_handler)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle"""
    settings: Settings = app.state.settings
    client: DocmostClient = app.state.client
    dispatcher: ToolDispatcher = app.state.dispatcher

    # Startup
    logger.info(f"Starting Docmost MCP against {settings.docmost_base_url} (read_only={settings.read_only})")
    if settings.needs_login and client.auth_cookie is None:
        logger.info("No API token configured, logging in with email and password...")
        await client.login(settings.docmost_email, settings.docmost_password)
    logger.info(f"Available tools: {', '.join(dispatcher.visible_tools().names())}")

    yield

    # Shutdown
    logger.info("Shutting down Docmost MCP...")
    await client.aclose()
    logger.info("Shutdown complete")


def create_app(
    settings: Settings | None = None,
    client: DocmostClient | None = None,
    registry: ToolRegistry | None = None,
) -> FastAPI:
    """Build the application.

    Args:
        settings: Configuration; read from the environment when omitted
        client: Docmost client to use instead of one built from settings
        registry: Tool registry to expose instead of the default catalog

    Returns:
        Configured FastAPI application
    """
    settings = settings or Settings()
    configure_logging(settings)

    client = client or DocmostClient(settings.docmost_base_url, api_token=settings.docmost_api_token)
    dispatcher = ToolDispatcher(
        client,
        registry=registry,
        read_only=settings.read_only,
        public_url=settings.public_url,
    )

    app = FastAPI(
        title="Docmost MCP",
        description="Docmost spaces, pages, search and attachments exposed as MCP tools",
        version=__version__,
        lifespan=lifespan,
    )

    # Store in app state for dependency injection
    app.state.settings = settings
    app.state.client = client
    app.state.dispatcher = dispatcher
    app.state.max_body_bytes = settings.max_body_bytes

    @app.middleware("http")
    async def cors(request: Request, call_next):
        """Answer preflights directly and open every response to any origin."""
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=PREFLIGHT_HEADERS)
        response = await call_next(request)
        response.headers["Access-Control-Allow-Origin"] = "*"
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Unmatched routes: 405 for methods we never serve, 404 otherwise."""
        if exc.status_code in (404, 405):
            if request.method not in ("GET", "POST"):
                return JSONResponse(status_code=405, content={"error": "Method not allowed"})
            return JSONResponse(status_code=404, content={"error": "Route not found"})
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.get("/", response_model=BannerResponse)
    async def root(request: Request) -> BannerResponse:
        """Service banner with the current tool catalog."""
        dispatcher = await get_dispatcher(request)
        return BannerResponse(message="Docmost MCP is running", tools=dispatcher.visible_tools().catalog())

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="ok")

    # Include API routers
    app.include_router(tool_call.router)
    app.include_router(well_known.router)
    app.include_router(rpc.router)

    return app
