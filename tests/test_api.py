"""
HTTP tests for the FastAPI layer.

Runs the real application over ASGITransport; only the database session
dependency is redirected to the per-test SQLite file.
"""

import uuid

from app.core.setting import settings
from app.core.validators import is_valid_code


def short_url(code: str) -> str:
    return f"{settings.BASE_URL.rstrip('/')}/{code}"


class TestHealth:
    async def test_healthz(self, client):
        response = await client.get("/healthz")
        assert response.status_code == 200
        assert response.json() == {"ok": True, "version": settings.VERSION}

    async def test_root(self, client):
        response = await client.get("/")
        assert response.status_code == 200
        assert response.json()["message"] == "URL Shortener Service"

    async def test_process_time_header(self, client):
        response = await client.get("/healthz")
        assert "x-process-time" in response.headers


class TestCreateLink:
    """POST /api/links"""

    async def test_generated_code(self, client):
        response = await client.post("/api/links", json={"destination": "https://example.com/page"})

        assert response.status_code == 201
        data = response.json()
        assert len(data["code"]) == settings.SHORT_CODE_LENGTH
        assert is_valid_code(data["code"])
        assert data["destination"] == "https://example.com/page"
        assert data["visit_count"] == 0
        assert data["last_visited_at"] is None
        assert data["created_at"]
        assert data["short_url"] == short_url(data["code"])
        uuid.UUID(data["id"])

    async def test_custom_code(self, client):
        response = await client.post(
            "/api/links", json={"destination": "https://x.com", "code": "abcdef"}
        )
        assert response.status_code == 201
        assert response.json()["code"] == "abcdef"
        assert response.json()["short_url"] == short_url("abcdef")

    async def test_url_alias_is_accepted(self, client):
        response = await client.post("/api/links", json={"url": "https://example.com"})
        assert response.status_code == 201
        assert response.json()["destination"] == "https://example.com"

    async def test_empty_code_generates_one(self, client):
        response = await client.post("/api/links", json={"destination": "https://x.com", "code": ""})
        assert response.status_code == 201
        assert is_valid_code(response.json()["code"])

    async def test_missing_destination(self, client):
        response = await client.post("/api/links", json={})
        assert response.status_code == 400
        assert response.json()["detail"] == "destination is required"

    async def test_invalid_destination(self, client):
        response = await client.post("/api/links", json={"destination": "not-a-url"})
        assert response.status_code == 400

    async def test_non_string_destination(self, client):
        response = await client.post("/api/links", json={"destination": 123})
        assert response.status_code == 400
        assert "destination" in response.json()["detail"][0]["loc"]

    async def test_non_string_code(self, client):
        response = await client.post("/api/links", json={"destination": "https://x.com", "code": 123456})
        assert response.status_code == 400

    async def test_malformed_body(self, client):
        response = await client.post(
            "/api/links", content="{not json", headers={"content-type": "application/json"}
        )
        assert response.status_code == 400

    async def test_non_http_destination(self, client):
        response = await client.post("/api/links", json={"destination": "mailto:someone@example.com"})
        assert response.status_code == 201
        assert response.json()["destination"] == "mailto:someone@example.com"

    async def test_invalid_code(self, client):
        response = await client.post("/api/links", json={"destination": "https://x.com", "code": "ab"})
        assert response.status_code == 400
        assert "[A-Za-z0-9]{6,8}" in response.json()["detail"]

    async def test_conflict(self, client):
        body = {"destination": "https://x.com", "code": "abcdef"}
        assert (await client.post("/api/links", json=body)).status_code == 201

        response = await client.post("/api/links", json=body)
        assert response.status_code == 409
        assert response.json()["detail"] == "Code already exists"


class TestListLinks:
    """GET /api/links"""

    async def test_empty(self, client):
        response = await client.get("/api/links")
        assert response.status_code == 200
        assert response.json() == []

    async def test_newest_first_with_short_urls(self, client):
        for code in ["first1", "second", "third3"]:
            await client.post("/api/links", json={"destination": "https://x.com", "code": code})

        response = await client.get("/api/links")
        assert response.status_code == 200
        data = response.json()
        assert [link["code"] for link in data] == ["third3", "second", "first1"]
        assert all(link["short_url"] == short_url(link["code"]) for link in data)


class TestLinkStats:
    """GET /api/links/{code}"""

    async def test_stats_do_not_count(self, client):
        await client.post("/api/links", json={"destination": "https://x.com", "code": "abcdef"})
        await client.get("/abcdef")

        response = await client.get("/api/links/abcdef")
        assert response.status_code == 200
        assert response.json()["visit_count"] == 1
        assert response.json()["last_visited_at"] is not None

        response = await client.get("/api/links/abcdef")
        assert response.json()["visit_count"] == 1

    async def test_unknown(self, client):
        assert (await client.get("/api/links/abcdef")).status_code == 404

    async def test_malformed(self, client):
        assert (await client.get("/api/links/ab")).status_code == 400


class TestRedirect:
    """GET /{code}"""

    async def test_redirects_and_counts(self, client):
        await client.post("/api/links", json={"destination": "https://example.com/page", "code": "abcdef"})

        for _ in range(2):
            response = await client.get("/abcdef")
            assert response.status_code == 302
            assert response.headers["location"] == "https://example.com/page"

        stats = await client.get("/api/links/abcdef")
        assert stats.json()["visit_count"] == 2

    async def test_unknown_code(self, client):
        response = await client.get("/zzzzzz")
        assert response.status_code == 404

    async def test_malformed_code(self, client):
        assert (await client.get("/ab")).status_code == 404
        assert (await client.get("/api")).status_code == 404
        assert (await client.get("/abc-def")).status_code == 404


class TestDeleteLink:
    """DELETE /api/links/{code}"""

    async def test_delete(self, client):
        await client.post("/api/links", json={"destination": "https://x.com", "code": "abcdef"})

        response = await client.delete("/api/links/abcdef")
        assert response.status_code == 204
        assert response.content == b""

        assert (await client.get("/abcdef")).status_code == 404
        assert (await client.delete("/api/links/abcdef")).status_code == 404

    async def test_delete_unknown(self, client):
        assert (await client.delete("/api/links/abcdef")).status_code == 404

    async def test_delete_malformed(self, client):
        assert (await client.delete("/api/links/ab")).status_code == 400

    async def test_code_reusable_after_delete(self, client):
        body = {"destination": "https://x.com", "code": "abcdef"}
        await client.post("/api/links", json=body)
        await client.delete("/api/links/abcdef")

        response = await client.post("/api/links", json={**body, "destination": "https://y.com"})
        assert response.status_code == 201
        assert response.json()["destination"] == "https://y.com"


class TestScenario:
    async def test_full_lifecycle(self, client):
        created = await client.post("/api/links", json={"destination": "https://example.com/page"})
        assert created.status_code == 201
        code = created.json()["code"]

        assert (await client.get(f"/{code}")).status_code == 302
        assert (await client.get(f"/{code}")).status_code == 302
        assert (await client.get(f"/api/links/{code}")).json()["visit_count"] == 2

        assert (await client.delete(f"/api/links/{code}")).status_code == 204
        assert (await client.get(f"/{code}")).status_code == 404
