"""Mock search webhook."""

from .app import WEBHOOK_PATH, create_app

__all__ = ["WEBHOOK_PATH", "create_app"]
