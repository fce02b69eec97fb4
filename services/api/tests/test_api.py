"""
HTTP tests against an app backed by a temporary JSON store.

Run with: pytest tests/test_api.py -v
"""
import pytest

from conftest import make_pdf, make_png

USER = {"X-User-Id": "user-instructor"}
STUDENT = {"X-User-Id": "user-student"}


@pytest.fixture
def workspace(client):
    resp = client.post(
        "/workspaces",
        json={"name": "Studio Alpha: Housing!", "instructor": "Prof. Lee", "creatorName": "Lee"},
        headers=USER,
    )
    assert resp.status_code == 201
    return resp.json()


@pytest.fixture
def board(client, workspace):
    resp = client.post(
        "/boards",
        files={"file": ("section.png", make_png(800, 600), "image/png")},
        data={"title": "Section A", "studentName": "Sam", "workspaceId": workspace["id"]},
        headers=STUDENT,
    )
    assert resp.status_code == 201
    return resp.json()


class TestHealth:
    def test_healthz(self, client):
        resp = client.get("/healthz")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"
        assert "X-Request-ID" in resp.headers

    def test_health_and_ready(self, client):
        assert client.get("/health").json()["status"] == "healthy"
        ready = client.get("/readyz")
        assert ready.status_code == 200
        assert ready.json()["backend"] == "json"


class TestWorkspaces:
    """Tests for workspace create/join/publish."""

    def test_create(self, workspace):
        assert workspace["slug"] == "studio-alpha-housing"
        assert len(workspace["inviteCode"]) == 8
        assert workspace["studioId"].startswith("studio-")
        assert workspace["members"][0]["role"] == "instructor"
        assert workspace["isPublic"] is False

    def test_create_requires_user(self, client):
        resp = client.post("/workspaces", json={"name": "Anonymous"})
        assert resp.status_code == 401
        assert resp.json()["error"] == "unauthorized"

    def test_join_by_invite(self, client, workspace):
        resp = client.post(
            "/workspaces/join",
            json={"inviteCode": workspace["inviteCode"].lower(), "name": "Sam"},
            headers=STUDENT,
        )
        assert resp.status_code == 200
        roles = {m["userId"]: m["role"] for m in resp.json()["members"]}
        assert roles == {"user-instructor": "instructor", "user-student": "student"}

    def test_join_bad_code(self, client):
        resp = client.post("/workspaces/join", json={"inviteCode": "NOPE1234"}, headers=STUDENT)
        assert resp.status_code == 404

    def test_get_missing(self, client):
        resp = client.get("/workspaces/workspace-missing")
        assert resp.status_code == 404
        assert resp.json()["error"] == "not_found"

    def test_publish_requires_metadata(self, client, workspace):
        resp = client.patch(f"/workspaces/{workspace['id']}/publish", json={"isPublic": True}, headers=USER)
        assert resp.status_code == 400
        assert resp.json()["error"] == "missing_field"

    def test_publish_and_list(self, client, workspace):
        resp = client.patch(
            f"/workspaces/{workspace['id']}/publish",
            json={"isPublic": True, "networkMetadata": {"department": "Architecture", "year": "Year 3"}},
            headers=USER,
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["isPublic"] is True
        assert body["publishedAt"]
        assert body["instructor"] == "Prof. Lee"

        public = client.get("/workspaces/public").json()
        assert [w["id"] for w in public] == [workspace["id"]]

    def test_publish_bad_department(self, client, workspace):
        resp = client.patch(
            f"/workspaces/{workspace['id']}/publish",
            json={"isPublic": True, "networkMetadata": {"department": "Law", "year": "Year 3"}},
            headers=USER,
        )
        assert resp.status_code == 422


class TestWallConfig:
    """Tests for studio wall configuration."""

    def test_default(self, client):
        body = client.get("/studios/studio-new/wall-config").json()
        assert body["exists"] is False
        assert body["config"]["layoutType"] == "square"
        assert body["config"]["walls"] == [{"height": 10.0, "width": 8.0}] * 4

    def test_replace(self, client):
        resp = client.put(
            "/studios/studio-a/wall-config",
            json={"walls": [{"width": 12, "height": 9}, {"width": 6, "height": 9}], "layoutType": "zigzag"},
            headers=USER,
        )
        assert resp.status_code == 200
        assert resp.json()["success"] is True

        body = client.get("/studios/studio-a/wall-config").json()
        assert body["exists"] is True
        assert body["config"]["walls"] == [{"height": 9.0, "width": 12.0}, {"height": 9.0, "width": 6.0}]
        assert body["config"]["layoutType"] == "zigzag"

    def test_post_also_replaces(self, client):
        resp = client.post(
            "/studios/studio-a/wall-config", json={"walls": [{"width": 20, "height": 12}]}, headers=USER
        )
        assert resp.status_code == 200
        assert client.get("/studios/studio-a/wall-config").json()["config"]["layoutType"] == "square"

    def test_invalid_sizes(self, client):
        url = "/studios/studio-a/wall-config"
        assert client.put(url, json={"walls": []}, headers=USER).status_code == 422
        assert client.put(url, json={"walls": [{"width": 0, "height": 9}]}, headers=USER).status_code == 422
        assert client.get(url).json()["exists"] is False

    @pytest.mark.parametrize("method", ["put", "post"])
    def test_replace_requires_user(self, client, method):
        resp = getattr(client, method)(
            "/studios/studio-a/wall-config", json={"walls": [{"width": 12, "height": 9}]}
        )
        assert resp.status_code == 401
        assert resp.json()["error"] == "unauthorized"
        assert client.get("/studios/studio-a/wall-config").json()["exists"] is False

    def test_transforms(self, client):
        walls = client.get("/studios/studio-new/walls").json()
        assert [w["index"] for w in walls] == [0, 1, 2, 3]
        assert walls[0]["width"] == pytest.approx(4.0)
        assert "rotationY" in walls[0]

    def test_hit_test(self, client):
        resp = client.post(
            "/studios/studio-new/hit-test",
            json={"origin": [0, 2.5, 0], "direction": [0, 0, 1]},
        )
        body = resp.json()
        assert body["hit"] is True
        assert body["wallIndex"] == 0
        assert body["x"] == pytest.approx(0.5)
        assert body["y"] == pytest.approx(0.5)

    def test_hit_test_miss(self, client):
        resp = client.post(
            "/studios/studio-new/hit-test",
            json={"origin": [0, 2.5, 0], "direction": [0, 1, 0]},
        )
        assert resp.json() == {"hit": False, "wallIndex": None, "x": None, "y": None}


class TestBoardUpload:
    """Tests for POST /boards."""

    def test_image(self, board, workspace):
        assert board["workspaceId"] == workspace["id"]
        assert board["ownerId"] == "user-student"
        assert (board["originalWidth"], board["originalHeight"]) == (800, 600)
        assert board["physicalWidth"] == pytest.approx(11.11, abs=0.01)
        assert board["physicalHeight"] == pytest.approx(8.33, abs=0.01)
        assert board["position"] is None

    def test_pdf_with_initial_position(self, client, workspace):
        resp = client.post(
            "/boards",
            files={"file": ("plan.pdf", make_pdf(612, 792), "application/pdf")},
            data={
                "title": "Plan",
                "studentName": "Sam",
                "workspaceId": workspace["id"],
                "positionWallIndex": "1",
                "positionX": "0.5",
                "positionY": "0.5",
            },
            headers=STUDENT,
        )
        assert resp.status_code == 201
        body = resp.json()
        assert body["physicalWidth"] == pytest.approx(8.5)
        assert body["position"]["wallIndex"] == 1
        assert body["position"]["width"] == pytest.approx(8.5 / 96)
        assert body["position"]["height"] == pytest.approx(11 / 120)

    def test_unsupported_kind(self, client, workspace):
        resp = client.post(
            "/boards",
            files={"file": ("notes.txt", b"hello", "text/plain")},
            data={"title": "Notes", "studentName": "Sam", "workspaceId": workspace["id"]},
            headers=STUDENT,
        )
        assert resp.status_code == 415
        assert resp.json()["error"] == "unsupported_file_kind"

    def test_corrupt_file(self, client, workspace):
        resp = client.post(
            "/boards",
            files={"file": ("broken.png", b"\x89PNG not really", "image/png")},
            data={"title": "Broken", "studentName": "Sam", "workspaceId": workspace["id"]},
            headers=STUDENT,
        )
        assert resp.status_code == 422
        assert resp.json()["error"] == "decode_failure"

    def test_too_large(self, client, workspace, settings):
        resp = client.post(
            "/boards",
            files={"file": ("huge.png", b"0" * (settings.max_upload_bytes + 1), "image/png")},
            data={"title": "Huge", "studentName": "Sam", "workspaceId": workspace["id"]},
            headers=STUDENT,
        )
        assert resp.status_code == 413

    def test_unknown_workspace(self, client):
        resp = client.post(
            "/boards",
            files={"file": ("a.png", make_png(10, 10), "image/png")},
            data={"title": "A", "studentName": "Sam", "workspaceId": "workspace-missing"},
            headers=STUDENT,
        )
        assert resp.status_code == 404

    def test_list_and_delete(self, client, board, workspace):
        listed = client.get("/boards", params={"workspaceId": workspace["id"]}).json()
        assert [b["id"] for b in listed] == [board["id"]]

        assert client.delete(f"/boards/{board['id']}", headers=STUDENT).status_code == 204
        assert client.get(f"/boards/{board['id']}").status_code == 404
        assert client.delete(f"/boards/{board['id']}", headers=STUDENT).status_code == 404


class TestPlacementEndpoints:
    """Tests for PATCH /boards/{id}/position and POST /boards/{id}/pin."""

    def test_patch(self, client, board):
        resp = client.patch(
            f"/boards/{board['id']}/position",
            json={"wallIndex": 2, "x": 0.3, "y": 0.6, "width": 0.2, "height": 0.15, "side": "front"},
            headers=STUDENT,
        )
        assert resp.status_code == 200
        pos = resp.json()["position"]
        assert pos == {"wallIndex": 2, "x": 0.3, "y": 0.6, "width": 0.2, "height": 0.15, "side": "front"}
        assert client.get(f"/boards/{board['id']}").json()["position"] == pos

    def test_missing_field_leaves_store_unchanged(self, client, board):
        url = f"/boards/{board['id']}/position"
        client.patch(url, json={"wallIndex": 1, "x": 0.5, "y": 0.5}, headers=STUDENT)

        resp = client.patch(url, json={"wallIndex": 0, "y": 0.9}, headers=STUDENT)
        assert resp.status_code == 400
        assert resp.json()["error"] == "missing_field"

        pos = client.get(f"/boards/{board['id']}").json()["position"]
        assert (pos["wallIndex"], pos["x"], pos["y"]) == (1, 0.5, 0.5)

    def test_out_of_range(self, client, board):
        resp = client.patch(
            f"/boards/{board['id']}/position", json={"wallIndex": 0, "x": 1.5, "y": 0.5}, headers=STUDENT
        )
        assert resp.status_code == 422

    def test_unknown_wall(self, client, board):
        resp = client.patch(
            f"/boards/{board['id']}/position", json={"wallIndex": 7, "x": 0.5, "y": 0.5}, headers=STUDENT
        )
        assert resp.status_code == 404

    def test_unknown_board(self, client):
        resp = client.patch(
            "/boards/board-missing/position", json={"wallIndex": 0, "x": 0.5, "y": 0.5}, headers=STUDENT
        )
        assert resp.status_code == 404

    def test_wall_index_checked_against_studio_walls(self, client, board, workspace):
        client.put(
            f"/studios/{workspace['studioId']}/wall-config",
            json={"walls": [{"width": 12, "height": 9}]},
            headers=USER,
        )
        resp = client.patch(
            f"/boards/{board['id']}/position", json={"wallIndex": 1, "x": 0.5, "y": 0.5}, headers=STUDENT
        )
        assert resp.status_code == 404

    def test_pin_sizes_from_physical_dimensions(self, client, board):
        resp = client.post(
            f"/boards/{board['id']}/pin", json={"wallIndex": 0, "x": 0.4, "y": 0.2}, headers=STUDENT
        )
        assert resp.status_code == 200
        pos = resp.json()["position"]
        assert (pos["x"], pos["y"]) == (0.4, 0.2)
        assert pos["width"] == pytest.approx((800 / 72) / 96)
        assert pos["height"] == pytest.approx((600 / 72) / 120)

    def test_pin_uses_current_walls(self, client, board, workspace):
        client.put(
            f"/studios/{workspace['studioId']}/wall-config",
            json={"walls": [{"width": 4, "height": 5}]},
            headers=USER,
        )
        resp = client.post(
            f"/boards/{board['id']}/pin", json={"wallIndex": 0, "x": 0.5, "y": 0.5}, headers=STUDENT
        )
        assert resp.json()["position"]["width"] == pytest.approx((800 / 72) / 48)

    def test_unpin(self, client, board):
        client.post(f"/boards/{board['id']}/pin", json={"wallIndex": 0, "x": 0.5, "y": 0.5}, headers=STUDENT)
        resp = client.delete(f"/boards/{board['id']}/position", headers=STUDENT)
        assert resp.status_code == 200
        assert resp.json()["position"] is None

    def test_placement_writes_require_user(self, client, board):
        """Anonymous moves, pins and unpins are refused and leave the board where it was."""
        url = f"/boards/{board['id']}"
        client.patch(f"{url}/position", json={"wallIndex": 1, "x": 0.5, "y": 0.5}, headers=STUDENT)

        assert client.patch(f"{url}/position", json={"wallIndex": 0, "x": 0.1, "y": 0.1}).status_code == 401
        assert client.post(f"{url}/pin", json={"wallIndex": 0, "x": 0.1, "y": 0.1}).status_code == 401
        assert client.delete(f"{url}/position").status_code == 401

        pos = client.get(url).json()["position"]
        assert (pos["wallIndex"], pos["x"], pos["y"]) == (1, 0.5, 0.5)


class TestNetwork:
    """Tests for GET /network/studios."""

    def _publish(self, client, name, department, year):
        ws = client.post("/workspaces", json={"name": name, "instructor": "Prof. Lee"}, headers=USER).json()
        client.patch(
            f"/workspaces/{ws['id']}/publish",
            json={"isPublic": True, "networkMetadata": {"department": department, "year": year}},
            headers=USER,
        )
        return ws

    def test_empty(self, client):
        body = client.get("/network/studios", params={"ticks": 10}).json()
        assert body["nodes"] == []
        assert body["edges"] == []

    def test_layout(self, client, workspace):
        a = self._publish(client, "Studio A", "Architecture", "Year 1")
        b = self._publish(client, "Studio B", "Interior Design", "Year 2")

        body = client.get(
            "/network/studios", params={"width": 1600, "height": 1200, "ticks": 100, "seed": 1}
        ).json()
        assert {n["id"] for n in body["nodes"]} == {a["id"], b["id"]}
        assert body["ticks"] == 100
        for n in body["nodes"]:
            assert n["radius"] >= 55
            assert 0 <= n["x"] <= 1600
            assert 0 <= n["y"] <= 1200
        assert body["edges"] == [{"source": a["id"], "target": b["id"], "kind": "instructor"}]

    def test_filter_by_department(self, client):
        self._publish(client, "Studio A", "Architecture", "Year 1")
        b = self._publish(client, "Studio B", "Interior Design", "Year 2")
        body = client.get("/network/studios", params={"department": "Interior Design", "ticks": 5}).json()
        assert [n["id"] for n in body["nodes"]] == [b["id"]]
