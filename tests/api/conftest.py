"""API test fixtures — demo app built with create_app + async test client.

Invariants:
    - get_db overridden to use the per-test SQLite session factory
    - Lifespan is not run by ASGITransport; the DB singleton is never touched
"""

from http import HTTPStatus
from uuid import UUID

import pytest
from fastapi import Depends
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from phial.api import responses
from phial.api.router import create_router, parse_params
from phial.app import create_app
from phial.core.errors import InvalidArgumentError
from phial.infrastructure.database import get_db
from phial.services.provider import Provider

from tests.models import Post


class PostCreate(BaseModel):
    title: str = Field(min_length=3)


def build_demo_router(files_dir):
    router = create_router(prefix="/demo", tags=["demo"])

    @router.get("/json")
    async def json_route():
        return responses.json("ok", {"hello": "world"}, headers={"x-foo": "bar"})

    @router.get("/html")
    async def html_route():
        return responses.html(HTTPStatus.OK, "<h1>Hello World</h1>")

    @router.get("/text")
    async def text_route():
        return responses.text(201, "Hello World!")

    @router.get("/status/{code}")
    async def status_route(code: str):
        return responses.status(code)

    @router.get("/files/{name}")
    async def file_route(name: str):
        return responses.file(files_dir / name, headers={"x-foo": "bar"})

    @router.get("/downloads/{name}")
    async def download_route(name: str):
        return responses.download(files_dir / name)

    @router.get("/redirect")
    async def redirect_route():
        return responses.redirect("http://example.com/")

    @router.get("/moved")
    async def moved_route():
        return responses.redirect("http://example.com/new", status="moved_permanently")

    @router.api_route("/echo", methods=["GET", "POST", "PUT"])
    async def echo_route(params: dict = Depends(parse_params)):
        return responses.json("ok", {"params": _printable(params)})

    @router.post("/posts")
    async def create_post(body: PostCreate, db: AsyncSession = Depends(get_db)):
        post = await Provider(db).insert(Post, body.model_dump())
        return responses.json("created", {"id": post.id, "title": post.title})

    @router.get("/posts/{post_id}")
    async def get_post(post_id: UUID, db: AsyncSession = Depends(get_db)):
        post = await Provider(db).get_or_404(Post, post_id)
        return responses.json("ok", {"id": post.id, "title": post.title})

    @router.get("/invalid")
    async def invalid_route():
        raise InvalidArgumentError("Unsupported clause mode 'xor'", field="mode")

    @router.get("/boom")
    async def boom_route():
        raise RuntimeError("secret internal detail")

    return router


def _printable(params: dict) -> dict:
    """UploadFile values reduced to their filename for echoing."""
    return {k: getattr(v, "filename", v) for k, v in params.items()}


@pytest.fixture
def files_dir(tmp_path):
    (tmp_path / "hello.txt").write_text("Hello file\n")
    (tmp_path / "report.csv").write_text("a,b\n1,2\n")
    return tmp_path


@pytest.fixture
def app(files_dir, test_session_factory):
    application = create_app(routers=[build_demo_router(files_dir)], title="demo")

    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    application.dependency_overrides[get_db] = override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
