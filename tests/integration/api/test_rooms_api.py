"""Rooms / Uploads / Health API 集成测试

测试完整的 HTTP 流程：
1. 创建房间 → 通过邀请码加入 → 列出房间
2. 第三人加入返回 409
3. 非成员访问房间返回 404
4. 图片上传与访问
"""

from dataclasses import replace

import pytest
from fastapi.testclient import TestClient

from scrawl.interfaces.api.main import create_app

pytestmark = pytest.mark.integration


class TestRoomsAPI:
    def test_create_room(self, client: TestClient, auth_headers):
        response = client.post("/api/rooms", headers=auth_headers("alice"))

        assert response.status_code == 201
        data = response.json()
        assert data["owner_id"] == "alice"
        assert data["member_count"] == 1
        assert len(data["code"]) == 6

    def test_requires_token(self, client: TestClient):
        assert client.post("/api/rooms").status_code == 401
        assert (
            client.post("/api/rooms", headers={"Authorization": "Bearer nope"}).status_code
            == 401
        )
        assert (
            client.post("/api/rooms", headers={"Authorization": "Basic abc"}).status_code == 401
        )

    def test_join_by_code_and_list(self, client: TestClient, auth_headers):
        created = client.post("/api/rooms", headers=auth_headers("alice")).json()

        joined = client.post(
            "/api/rooms/join", json={"code": created["code"]}, headers=auth_headers("bob")
        )

        assert joined.status_code == 200
        assert joined.json()["id"] == created["id"]
        assert joined.json()["member_count"] == 2

        listing = client.get("/api/rooms", headers=auth_headers("bob")).json()
        assert listing["total"] == 1
        assert listing["rooms"][0]["id"] == created["id"]

    def test_third_member_gets_conflict(self, client: TestClient, auth_headers):
        code = client.post("/api/rooms", headers=auth_headers("alice")).json()["code"]
        client.post("/api/rooms/join", json={"code": code}, headers=auth_headers("bob"))

        response = client.post(
            "/api/rooms/join", json={"code": code}, headers=auth_headers("carol")
        )

        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "room_full"

    def test_owner_cannot_join_own_room_twice(self, client: TestClient, auth_headers):
        code = client.post("/api/rooms", headers=auth_headers("alice")).json()["code"]

        response = client.post(
            "/api/rooms/join", json={"code": code}, headers=auth_headers("alice")
        )

        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "already_member"

    def test_unknown_code_gets_404(self, client: TestClient, auth_headers):
        response = client.post(
            "/api/rooms/join", json={"code": "zzzzzz"}, headers=auth_headers("bob")
        )

        assert response.status_code == 404

    def test_get_room_only_for_members(self, client: TestClient, auth_headers):
        room_id = client.post("/api/rooms", headers=auth_headers("alice")).json()["id"]

        assert client.get(f"/api/rooms/{room_id}", headers=auth_headers("alice")).status_code == 200
        assert client.get(f"/api/rooms/{room_id}", headers=auth_headers("mallory")).status_code == 404
        assert client.get("/api/rooms/missing", headers=auth_headers("alice")).status_code == 404


class TestUploadsAPI:
    def test_upload_image_and_fetch_it(self, client: TestClient, auth_headers):
        response = client.post(
            "/api/uploads",
            files={"file": ("dot.png", b"\x89PNG\r\n\x1a\nfake", "image/png")},
            headers=auth_headers("alice"),
        )

        assert response.status_code == 201
        url = response.json()["url"]
        assert url.startswith("/uploads/")
        assert url.endswith(".png")

        fetched = client.get(url)
        assert fetched.status_code == 200
        assert fetched.content == b"\x89PNG\r\n\x1a\nfake"

    def test_non_image_is_rejected(self, client: TestClient, auth_headers):
        response = client.post(
            "/api/uploads",
            files={"file": ("notes.txt", b"hello", "text/plain")},
            headers=auth_headers("alice"),
        )

        assert response.status_code == 400

    def test_svg_upload_is_rejected(self, client: TestClient, auth_headers):
        response = client.post(
            "/api/uploads",
            files={"file": ("x.svg", b"<svg onload=\"alert(1)\"/>", "image/svg+xml")},
            headers=auth_headers("alice"),
        )

        assert response.status_code == 400

    def test_oversize_upload_is_rejected(self, container, auth_headers):
        small = replace(container, max_upload_bytes=8)

        with TestClient(create_app(small)) as client:
            response = client.post(
                "/api/uploads",
                files={"file": ("big.png", b"x" * 64, "image/png")},
                headers=auth_headers("alice"),
            )

        assert response.status_code == 400

    def test_upload_requires_token(self, client: TestClient):
        response = client.post(
            "/api/uploads", files={"file": ("dot.png", b"png", "image/png")}
        )

        assert response.status_code == 401


class TestHealthAPI:
    @pytest.mark.parametrize("path", ["/health", "/api/health"])
    def test_health(self, client: TestClient, path: str):
        response = client.get(path)

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_api_health_reports_realtime_statistics(self, client: TestClient):
        data = client.get("/api/health").json()

        assert data["realtime"] == {"total_rooms": 0, "total_connections": 0, "rooms": {}}
