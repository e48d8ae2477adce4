import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from storefront.core.config import Settings
from storefront.core.db import build_engine, build_sessionmaker, create_tables
from storefront.main import create_app


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def settings(tmp_path):
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'storefront.db'}",
        MEDIA_ROOT=str(tmp_path / "media"),
        SECRET_KEY="test-secret",
        ENVIRONMENT="test",
    )


@pytest.fixture()
def app(settings):
    return create_app(settings)


@pytest.fixture()
def client(app):
    with TestClient(app) as client:
        yield client


@pytest_asyncio.fixture()
async def session_factory(settings):
    engine = build_engine(settings)
    await create_tables(engine)
    yield build_sessionmaker(engine)
    await engine.dispose()


@pytest_asyncio.fixture()
async def db(session_factory):
    async with session_factory() as session:
        yield session


# ---------------------------------------------------------------------------
# HTTP factories
# ---------------------------------------------------------------------------
@pytest.fixture()
def register(client):
    def _register(name="Jane Doe", email="jane@example.com", password="secret123", role="customer"):
        response = client.post(
            "/api/auth/register",
            json={"name": name, "email": email, "password": password, "role": role},
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _register


@pytest.fixture()
def admin(register):
    return register(name="Admin", email="admin@example.com", role="admin")


@pytest.fixture()
def customer(register):
    return register(name="Customer", email="customer@example.com")


@pytest.fixture()
def admin_headers(admin):
    return auth_header(admin["token"])


@pytest.fixture()
def customer_headers(customer):
    return auth_header(customer["token"])


@pytest.fixture()
def make_category(client, admin_headers):
    def _make_category(name="Electronics", description="Gadgets and devices"):
        response = client.post(
            "/api/categories",
            json={"name": name, "description": description},
            headers=admin_headers,
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _make_category


@pytest.fixture()
def make_product(client, admin_headers, make_category):
    default_category = {}

    def _make_product(name="Widget", price=10.0, stock=5, category_id=None, description=None):
        if category_id is None:
            if not default_category:
                default_category.update(make_category())
            category_id = default_category["id"]
        response = client.post(
            "/api/products",
            data={
                "name": name,
                "description": description or f"A very useful {name.lower()}",
                "price": str(price),
                "category": str(category_id),
                "stock": str(stock),
            },
            headers=admin_headers,
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _make_product
