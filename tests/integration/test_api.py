"""Integration tests for the FastAPI REST API."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from docedit.api.app import create_app, create_session_manager
from docedit.api.deps import init_session_manager, reset_session_manager
from docedit.settings import Settings

EDIT = "/api/__docedit/edit"


def _build_app(**overrides: object):  # type: ignore[no-untyped-def]
    values: dict[str, object] = {
        "dev_mode": True,
        "preview_debounce_ms": 10,
        "session_ttl_seconds": 3600,
        "session_cleanup_interval": 9999,
    }
    values.update(overrides)
    settings = Settings(**values)  # type: ignore[arg-type]
    app = create_app(settings=settings)
    # Manually init the manager (ASGITransport doesn't trigger lifespan)
    mgr = create_session_manager(settings, app.state.gateway, app.state.preview_backend)
    init_session_manager(mgr, disable_session_list=settings.disable_session_list)
    return app


@pytest.fixture
def app():
    yield _build_app()
    reset_session_manager()


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


# ---------------------------------------------------------------------------
# Health & adapters
# ---------------------------------------------------------------------------


class TestHealthEndpoint:
    async def test_health(self, client: AsyncClient) -> None:
        response = await client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["dev_mode"] is True
        assert "version" in data

    async def test_timing_header(self, client: AsyncClient) -> None:
        response = await client.get("/health")
        assert "x-request-duration-ms" in response.headers


class TestAdaptersEndpoint:
    async def test_list_adapters(self, client: AsyncClient) -> None:
        response = await client.get("/adapters")
        assert response.status_code == 200
        data = response.json()
        assert [a["id"] for a in data["adapters"]] == ["markdown", "source", "split"]
        assert data["default"] == "split"


# ---------------------------------------------------------------------------
# Development-only gate
# ---------------------------------------------------------------------------


class TestDevModeGate:
    @pytest.fixture
    async def prod_client(self):
        app = _build_app(dev_mode=False)
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            yield c
        reset_session_manager()

    @pytest.mark.parametrize(
        ("method", "url", "body"),
        [
            ("GET", f"{EDIT}?path=/tmp/x.md", None),
            ("POST", EDIT, {"path": "/tmp/x.md", "content": "# x"}),
            ("POST", f"{EDIT}/preview", {"source": "# x"}),
            ("POST", "/sessions", {"path": "/tmp/x.md"}),
            ("GET", "/sessions", None),
        ],
    )
    async def test_editing_routes_forbidden(
        self, prod_client: AsyncClient, method: str, url: str, body: dict | None
    ) -> None:
        response = await prod_client.request(method, url, json=body)
        assert response.status_code == 403
        assert response.json() == {
            "success": False,
            "error": "Editor only available in development",
        }

    async def test_health_still_served(self, prod_client: AsyncClient) -> None:
        response = await prod_client.get("/health")
        assert response.status_code == 200
        assert response.json()["dev_mode"] is False


# ---------------------------------------------------------------------------
# Read / write boundary
# ---------------------------------------------------------------------------


class TestReadEndpoint:
    async def test_read(self, client: AsyncClient, doc_path: Path) -> None:
        response = await client.get(EDIT, params={"path": str(doc_path)})
        assert response.status_code == 200
        assert response.json() == {"content": doc_path.read_text(encoding="utf-8")}

    async def test_missing_path_parameter(self, client: AsyncClient) -> None:
        response = await client.get(EDIT)
        assert response.status_code == 400
        assert response.json() == {"error": "Missing path parameter"}

    async def test_relative_path(self, client: AsyncClient) -> None:
        response = await client.get(EDIT, params={"path": "docs/index.mdx"})
        assert response.status_code == 400
        assert response.json()["error"] == "Path must be absolute"

    async def test_missing_file(self, client: AsyncClient, tmp_path: Path) -> None:
        response = await client.get(EDIT, params={"path": str(tmp_path / "gone.md")})
        assert response.status_code == 400
        assert response.json()["error"] == "File does not exist"


class TestSaveEndpoint:
    async def test_save(self, client: AsyncClient, doc_path: Path) -> None:
        response = await client.post(EDIT, json={"path": str(doc_path), "content": "# Hello"})
        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert doc_path.read_bytes() == b"# Hello"

    async def test_invalid_content(self, client: AsyncClient, doc_path: Path) -> None:
        before = doc_path.read_bytes()
        response = await client.post(
            EDIT, json={"path": str(doc_path), "content": "---\ntitle: x\n\n<Tabs>\n"}
        )
        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert data["error"] == "Invalid document content"
        assert data["validation"]["valid"] is False
        assert data["validation"]["errors"][0]["line"] == 1
        assert doc_path.read_bytes() == before

    async def test_unencodable_content_is_a_client_error(
        self, client: AsyncClient, doc_path: Path
    ) -> None:
        before = doc_path.read_bytes()
        body = json.dumps({"path": str(doc_path), "content": "# Title \ud800 body\n"})
        response = await client.post(
            EDIT, content=body.encode(), headers={"content-type": "application/json"}
        )
        assert response.status_code == 400
        assert response.json()["error"].startswith("Failed to write file")
        assert doc_path.read_bytes() == before

    async def test_unsupported_extension(self, client: AsyncClient, tmp_path: Path) -> None:
        path = tmp_path / "notes.txt"
        path.write_text("x", encoding="utf-8")
        response = await client.post(EDIT, json={"path": str(path), "content": "y"})
        assert response.status_code == 400
        assert response.json()["error"] == "File must have extension: .md, .mdx"
        assert path.read_text(encoding="utf-8") == "x"

    async def test_configured_extensions(self, tmp_path: Path) -> None:
        app = _build_app(allowed_extensions=[".markdown"])
        path = tmp_path / "notes.markdown"
        path.write_text("x", encoding="utf-8")
        try:
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as c:
                response = await c.post(EDIT, json={"path": str(path), "content": "# y"})
        finally:
            reset_session_manager()
        assert response.status_code == 200
        assert path.read_text(encoding="utf-8") == "# y"


class TestPreviewEndpoint:
    async def test_preview(self, client: AsyncClient) -> None:
        response = await client.post(
            f"{EDIT}/preview", json={"source": "---\ntitle: T\n---\n# Hi\n"}
        )
        assert response.status_code == 200
        data = response.json()
        assert "<h1>Hi</h1>" in data["body"]
        assert data["frontmatter"] == {"title": "T"}

    async def test_preview_components(self, client: AsyncClient) -> None:
        response = await client.post(
            f"{EDIT}/preview",
            json={"source": "<Callout>\nNote\n</Callout>\n", "components": {"Callout": "aside"}},
        )
        assert response.status_code == 200
        assert '<aside data-component="Callout">' in response.json()["body"]

    async def test_preview_compile_error(self, client: AsyncClient) -> None:
        response = await client.post(f"{EDIT}/preview", json={"source": "---\ntitle: T\n"})
        assert response.status_code == 422
        assert "Unterminated front matter" in response.json()["error"]

    async def test_preview_not_installed(self) -> None:
        app = _build_app(preview_enabled=False)
        try:
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as c:
                response = await c.post(f"{EDIT}/preview", json={"source": "# x"})
        finally:
            reset_session_manager()
        assert response.status_code == 503
        assert response.json() == {"error": "Preview compiler not installed"}


# ---------------------------------------------------------------------------
# Session endpoints
# ---------------------------------------------------------------------------


async def _open(client: AsyncClient, path: Path, **extra: object) -> dict:
    response = await client.post("/sessions", json={"path": str(path), **extra})
    assert response.status_code == 201
    return response.json()


class TestSessionEndpoints:
    async def test_create_session(self, client: AsyncClient, doc_path: Path) -> None:
        data = await _open(client, doc_path, metadata={"user": "alice"})
        assert len(data["session_id"]) == 32
        assert data["adapter"] == "split"
        assert data["status"] == "ready"
        assert data["path"] == str(doc_path)
        assert data["metadata"] == {"user": "alice"}
        assert data["session"]["content"] == doc_path.read_text(encoding="utf-8")

    async def test_create_with_bad_path(self, client: AsyncClient, tmp_path: Path) -> None:
        response = await client.post("/sessions", json={"path": str(tmp_path / "none.md")})
        assert response.status_code == 400
        assert response.json()["detail"] == "File does not exist"

    async def test_create_with_unknown_adapter(self, client: AsyncClient, doc_path: Path) -> None:
        response = await client.post("/sessions", json={"path": str(doc_path), "adapter": "x"})
        assert response.status_code == 400
        assert "Unknown editor adapter" in response.json()["detail"]

    async def test_edit_preview_save_flow(self, client: AsyncClient, doc_path: Path) -> None:
        sid = (await _open(client, doc_path))["session_id"]

        response = await client.put(f"/sessions/{sid}/content", json={"content": "# Edited\n"})
        assert response.status_code == 200
        assert response.json()["accepted"] is True
        assert response.json()["session"]["dirty"] is True

        response = await client.get(f"/sessions/{sid}/preview", params={"wait": True})
        assert response.status_code == 200
        preview = response.json()
        assert preview["enabled"] is True
        assert preview["preview"]["status"] == "ready"
        assert "<h1>Edited</h1>" in preview["preview"]["rendered"]

        response = await client.post(f"/sessions/{sid}/save")
        assert response.json()["accepted"] is True
        assert response.json()["session"]["dirty"] is False
        assert doc_path.read_text(encoding="utf-8") == "# Edited\n"

        response = await client.get(f"/sessions/{sid}/view")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "docedit-split" in response.text

    async def test_invalid_save_then_dismiss(self, client: AsyncClient, doc_path: Path) -> None:
        sid = (await _open(client, doc_path))["session_id"]
        await client.put(f"/sessions/{sid}/content", json={"content": "<Steps>\n"})

        response = await client.post(f"/sessions/{sid}/save")
        data = response.json()
        assert data["accepted"] is False
        assert data["session"]["status"] == "error"
        assert data["session"]["last_error"] == "Invalid document content"
        assert data["session"]["last_validation"]["errors"][0]["line"] == 1

        response = await client.put(f"/sessions/{sid}/content", json={"content": "x"})
        assert response.status_code == 409

        response = await client.post(f"/sessions/{sid}/dismiss")
        assert response.json()["accepted"] is True
        assert response.json()["session"]["status"] == "ready"
        assert response.json()["session"]["content"] == "<Steps>\n"

    async def test_list_and_delete(self, client: AsyncClient, doc_path: Path) -> None:
        sid = (await _open(client, doc_path))["session_id"]
        response = await client.get("/sessions")
        assert [s["session_id"] for s in response.json()["sessions"]] == [sid]

        response = await client.delete(f"/sessions/{sid}")
        assert response.status_code == 204
        response = await client.get(f"/sessions/{sid}")
        assert response.status_code == 404

    async def test_unknown_session(self, client: AsyncClient) -> None:
        response = await client.post("/sessions/nonexistent/save")
        assert response.status_code == 404

    async def test_session_list_disabled(self) -> None:
        app = _build_app(disable_session_list=True)
        try:
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as c:
                response = await c.get("/sessions")
        finally:
            reset_session_manager()
        assert response.status_code == 403
