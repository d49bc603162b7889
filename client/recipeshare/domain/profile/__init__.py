"""Navigation profile cache exports."""

from .schemas import ProfileResponse
from .service import ProfileCache

__all__ = ["ProfileCache", "ProfileResponse"]
