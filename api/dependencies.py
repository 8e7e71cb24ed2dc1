"""
Shared FastAPI dependencies for the Image Render Flow system.
"""

import logging
from typing import Any, Dict

from fastapi import HTTPException, Request

from services.render_service import RenderService

logger = logging.getLogger(__name__)


def get_render_service(request: Request) -> RenderService:
    """
    Get the render service from app state.

    Args:
        request: FastAPI request object

    Returns:
        RenderService instance created at startup

    Raises:
        HTTPException: If the service was not initialized
    """
    try:
        return request.app.state.render_service
    except AttributeError as e:
        logger.error(f"Render service not initialized in app state: {e}")
        raise HTTPException(
            status_code=500, detail="Internal server error: Render service not initialized"
        )


def get_config(request: Request) -> Dict[str, Any]:
    """
    Get application configuration.

    Args:
        request: FastAPI request object

    Returns:
        Configuration dictionary
    """
    try:
        return request.app.state.config
    except AttributeError:
        logger.warning("Config not found in app state, using defaults")
        return {}
