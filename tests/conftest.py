"""
Shared fixtures.

The app is built through create_app with in-memory stores, so no MongoDB
is needed. Settings never read a local .env file here.
"""

import os

os.environ.setdefault("APP_ENV", "test")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import config as app_config  # noqa: E402

app_config.Settings.model_config["env_file"] = None

from config import Settings  # noqa: E402
from container import Container, build_container  # noqa: E402
from database import ORDER_COLLECTION, PRODUCT_COLLECTION, USER_COLLECTION  # noqa: E402
from main import create_app  # noqa: E402
from stores import InMemoryStore  # noqa: E402

TEST_SECRET = "test-secret"


@pytest.fixture
def settings() -> Settings:
    return Settings(jwt_secret=TEST_SECRET, jwt_expires_in="1h", app_env="test", log_json=False)


@pytest.fixture
def stores():
    return {
        USER_COLLECTION: InMemoryStore(USER_COLLECTION),
        PRODUCT_COLLECTION: InMemoryStore(PRODUCT_COLLECTION),
        ORDER_COLLECTION: InMemoryStore(ORDER_COLLECTION),
    }


@pytest.fixture
def container(settings, stores) -> Container:
    return build_container(settings, stores)


@pytest.fixture
def client(settings, container):
    app = create_app(settings, container)
    with TestClient(app) as c:
        yield c


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(container) -> dict:
    admin = container.users.ensure_admin("admin@example.com", "admin-pass", "Admin")
    token = container.tokens.issue({"sub": admin.id, "email": admin.email, "role": "admin"})
    return bearer(token)


@pytest.fixture
def user_headers(container) -> dict:
    user = container.users.create({"name": "Jane", "email": "jane@example.com", "password": "secret"})
    token = container.tokens.issue({"sub": user.id, "email": user.email, "role": "user"})
    return bearer(token)
