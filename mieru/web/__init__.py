"""HTTP API over the analysis pipeline."""

from mieru.web.app import create_app

__all__ = ["create_app"]
