"""FastAPI routers acting as controllers in the MVC architecture."""

from . import voice

__all__ = ["voice"]
