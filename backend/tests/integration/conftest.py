"""
Conftest for API integration tests.

Every test here drives the FastAPI app through the `client` fixture.
"""

import pytest

pytestmark = [pytest.mark.integration, pytest.mark.api]
