"""
Entry point for CommandStack API.

Re-exports the FastAPI app from commandstack/api/main.py for ASGI servers
(``uvicorn commandstack.app:app``) and starts it with settings when run
as a script.
"""

from commandstack.api.main import app, run_server
from commandstack.config import get_settings

__all__ = ["app"]


def main() -> None:
    settings = get_settings()
    run_server(
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload and settings.is_development,
    )


if __name__ == "__main__":
    main()
