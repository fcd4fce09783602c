# API module - claim endpoints
from .endpoints import router

__all__ = ["router"]
