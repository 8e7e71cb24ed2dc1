"""
Pytest configuration for API integration tests
"""

import pytest
from fastapi.testclient import TestClient


@pytest.fixture(scope="function")
def client():
    """
    Create a test client with properly initialized app state.
    Each test gets a fresh render service to avoid state contamination.
    """
    from config import Settings
    from imaging.backends import create_surface
    from imaging.codec import RasterCodec
    from main import app
    from services.render_service import RenderService

    settings = Settings()
    render_service = RenderService(
        surface=create_surface(settings.render.backend),
        codec=RasterCodec(),
        max_workers=1,
    )

    # Set in app state
    app.state.render_service = render_service
    app.state.config = settings.to_dict()

    # Create test client (no context manager to avoid running the lifespan)
    test_client = TestClient(app, raise_server_exceptions=False)

    yield test_client
