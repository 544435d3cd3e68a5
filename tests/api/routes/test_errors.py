import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from storefront.api.errors import create_error_response, flatten_error, register_exception_handlers
from storefront.core.exceptions import AuthenticationError, ConflictError, NotFoundError


@pytest.fixture(scope="module")
def app_with_errors():
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/validation")
    async def validation_endpoint(param: int):
        return {"param": param}

    @app.get("/not-found")
    async def not_found():
        raise NotFoundError("Product", "p-1")

    @app.get("/conflict")
    async def conflict():
        raise ConflictError("Product with reference 'X' already exists")

    @app.get("/unauthenticated")
    async def unauthenticated():
        raise AuthenticationError("Invalid credentials")

    @app.get("/integrity")
    async def integrity_error():
        raise IntegrityError("mock stmt", "mock params", Exception("mock orig"))

    @app.get("/sqlalchemy")
    async def sqlalchemy_error():
        raise SQLAlchemyError("mock SQL error")

    @app.get("/general")
    async def general_error():
        raise Exception("some unexpected error")

    return app


@pytest_asyncio.fixture
async def error_client(app_with_errors):
    transport = ASGITransport(app=app_with_errors, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.mark.asyncio
async def test_validation_exception(error_client):
    response = await error_client.get("/validation", params={"param": "abc"})

    assert response.status_code == 400
    assert response.json()["detail"].startswith("query.param:")


@pytest.mark.asyncio
async def test_domain_errors_keep_their_status(error_client):
    response = await error_client.get("/not-found")
    assert response.status_code == 404
    assert response.json() == {"detail": "Product with ID p-1 not found"}

    response = await error_client.get("/conflict")
    assert response.status_code == 409

    response = await error_client.get("/unauthenticated")
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_integrity_exception(error_client):
    response = await error_client.get("/integrity")

    assert response.status_code == 409
    assert response.json() == {"detail": "Database constraint violated"}


@pytest.mark.asyncio
async def test_sqlalchemy_exception(error_client):
    response = await error_client.get("/sqlalchemy")

    assert response.status_code == 500
    assert response.json() == {"detail": "Database error"}


@pytest.mark.asyncio
async def test_general_exception(error_client):
    response = await error_client.get("/general")

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal Server Error"}


def test_flatten_error():
    err = {"loc": ("body", "slug"), "msg": "String should match pattern"}

    assert flatten_error(err) == "body.slug: String should match pattern"


def test_create_error_response():
    assert create_error_response("boom") == {"detail": "boom"}
