"""FastAPI routers acting as controllers in the MVC architecture."""

from . import assessment

__all__ = ["assessment"]
