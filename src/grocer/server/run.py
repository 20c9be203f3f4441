"""Helper for running the Grocer ASGI application."""

from __future__ import annotations

import os

import uvicorn


def serve(host: str | None = None, port: int | None = None, reload: bool = False) -> None:
    """Run the API with uvicorn using the application factory."""

    uvicorn.run(
        "grocer.server.app:create_app",
        host=host or os.environ.get("GROCER_SERVER_HOST", "127.0.0.1"),
        port=port or int(os.environ.get("GROCER_SERVER_PORT", "8000")),
        reload=reload or os.environ.get("RELOAD") == "1",
        factory=True,
    )


def main() -> None:
    serve()


if __name__ == "__main__":
    main()
