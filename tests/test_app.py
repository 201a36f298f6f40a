from unittest.mock import patch

from conftest import store_files, write_record


class AdminAppTest:
    def test_index_renders_form(self, client):
        res = client.get("/")
        assert res.status_code == 200
        assert b"Add Miniature" in res.data
        assert b'"28mm"' in res.data

    def test_robots(self, client):
        res = client.get("/robots.txt")
        assert res.mimetype == "text/plain"
        assert b"Disallow: /" in res.data

    def test_unknown_path(self, client):
        assert client.get("/nope").status_code == 404

    def test_metadata_empty(self, client):
        res = client.get("/api/metadata")
        assert res.status_code == 200
        assert res.get_json() == {
            "manufacturers": [],
            "games":         [],
            "factions":      [],
            "scales":        [],
            "slugs":         [],
        }

    def test_metadata_lists_records(self, client, paths):
        write_record(paths["records"], "a", 'manufacturer: "Foo"\nscale: "28mm"\n')
        data = client.get("/api/metadata").get_json()
        assert data["manufacturers"] == ["Foo"]
        assert data["scales"] == ["28mm"]
        assert data["slugs"] == ["a"]

    def test_save_success(self, client, paths, submission):
        res = client.post("/api/save", json=submission)
        assert res.status_code == 200
        data = res.get_json()
        assert data["identifier"] == "space-marine"
        assert data["message"] == 'Saved "Space Marine" (1 photo)'
        assert data["warnings"] == ["Missing logo: manufacturers/games-workshop.png"]
        assert len(data["files"]) == 2

    def test_save_twice_conflicts(self, client, submission):
        assert client.post("/api/save", json=submission).status_code == 200
        res = client.post("/api/save", json=submission)
        assert res.status_code == 409
        assert "space-marine" in res.get_json()["error"]

    def test_save_missing_fields(self, client, paths, submission):
        del submission["scale"]
        res = client.post("/api/save", json=submission)
        assert res.status_code == 400
        assert res.get_json() == {"error": "Missing required fields"}
        assert store_files(paths) == []

    def test_save_non_json_body(self, client):
        res = client.post("/api/save", data="title=x", content_type="text/plain")
        assert res.status_code == 400
        assert "error" in res.get_json()

    def test_metadata_get_only(self, client):
        assert client.post("/api/metadata").status_code == 405

    def test_unexpected_failure_is_logged(self, client, tmp_path, submission):
        with patch("app.save", side_effect=OSError("disk full")):
            res = client.post("/api/save", json=submission)
        assert res.status_code == 500
        assert res.get_json() == {"error": "disk full"}
        log = (tmp_path / "last_error.log").read_text(encoding="utf-8")
        assert "OSError: disk full" in log

    def test_oversized_request_returns_json(self, client, submission, monkeypatch):
        from app import app

        monkeypatch.setitem(app.config, "MAX_CONTENT_LENGTH", 64)
        res = client.post("/api/save", json=submission)
        assert res.status_code == 413
        assert "too large" in res.get_json()["error"]
