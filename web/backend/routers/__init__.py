"""API route handlers."""

from .discovery import router as discovery_router
from .analyze import router as analyze_router
from .stats import router as stats_router
