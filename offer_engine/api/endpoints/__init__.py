"""API endpoints package."""

from . import health
from . import offers
from . import requirements
from . import expressions

__all__ = ["health", "offers", "requirements", "expressions"]
