# Docmost MCP server
# Main module initialization

__version__ = "0.1.0"


def main() -> None:
    """CLI entry point: validate configuration, then serve HTTP."""
    import uvicorn
    from pydantic import ValidationError

    from .config import Settings
    from .main import create_app

    try:
        settings = Settings()
    except ValidationError as e:
        raise SystemExit(f"Invalid configuration:\n{e}")

    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_level=settings.log_level.lower())
