"""REST API for form submission and admin exports."""

from sbe_earthing.api.app import app

__all__ = ["app"]
