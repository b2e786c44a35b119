# backend/tests/conftest.py
import os
import sys
import pytest
from fastapi.testclient import TestClient

# Make /Project/backend importable as top-level
BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

# Pin provider settings before anything reads the environment
MAPBOX_HOST = "api.mapbox.test"
os.environ["MAPBOX_ACCESS_TOKEN"] = "test-token"
os.environ["MAPBOX_BASE_URL"] = f"https://{MAPBOX_HOST}"
os.environ["APP_ENV"] = "test"
os.environ.pop("ENABLE_CACHE", None)

from config import get_settings  # noqa: E402
from main import create_app  # noqa: E402
from services.bootstrap import build_services  # noqa: E402


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def services(settings):
    # fresh caches per test
    return build_services(settings)


@pytest.fixture
def client(services):
    # Use context manager so FastAPI lifespan (startup/shutdown) runs
    with TestClient(create_app(services=services)) as c:
        yield c


@pytest.fixture
def calculator(services):
    return services.calculator


@pytest.fixture
def gas_prices(services):
    return services.gas_prices
