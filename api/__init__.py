"""HTTP interface for the interview server."""
from .errors import install_error_handlers
from .routes import router

__all__ = ["install_error_handlers", "router"]
