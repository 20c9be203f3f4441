"""ASGI application factory and dependencies for the Grocer server."""

from grocer.server.app import create_app

__all__ = ["create_app"]
