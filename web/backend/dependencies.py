#!/usr/bin/env python3
"""
FastAPI dependencies for dependency injection.
"""

from typing import Optional

from fastapi import Header, HTTPException, Request

from core.app_context import AppContext
from .services.discovery_service import DiscoveryService


def get_app_context(request: Request) -> AppContext:
    """The AppContext built at startup (or injected by tests)."""
    ctx = getattr(request.app.state, 'ctx', None)
    if ctx is None:
        raise HTTPException(status_code=503, detail="Application is not initialized")
    return ctx


def get_discovery_service(request: Request) -> DiscoveryService:
    return DiscoveryService(get_app_context(request))


def get_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    """
    Caller identity from the X-User-Id header.

    Authentication happens upstream; this service only scopes data by user.
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return x_user_id.strip()
