"""Unmatched-request behaviour in production and development."""

from starlette.testclient import TestClient

from navigatio_api.main import create_app
from navigatio_api.responder import DEV_STATUS_TEXT


def test_production_spa_fallback(prod_config) -> None:
    client = TestClient(create_app(prod_config))
    for path in ("/", "/bookings/42", "/deep/client/route?tab=2", "/api/unknown-xyz"):
        resp = client.get(path)
        assert resp.status_code == 200, path
        assert resp.text == "<html>navigatio</html>"


def test_production_serves_built_assets(prod_config) -> None:
    client = TestClient(create_app(prod_config))
    resp = client.get("/static/app.js")
    assert resp.status_code == 200
    assert resp.text == "console.log(1)"


def test_production_asset_lookup_cannot_escape_build_dir(prod_config, tmp_path) -> None:
    (tmp_path / "secret.txt").write_text("secret", encoding="utf-8")
    client = TestClient(create_app(prod_config))
    resp = client.get("/%2e%2e/secret.txt")
    assert resp.status_code == 200
    assert resp.text == "<html>navigatio</html>"


def test_development_root_status(dev_config) -> None:
    client = TestClient(create_app(dev_config))
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.text == DEV_STATUS_TEXT


def test_development_unknown_api_returns_404(dev_config) -> None:
    client = TestClient(create_app(dev_config))
    resp = client.get("/api/unknown-xyz")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "API endpoint not found"}
    assert client.delete("/api/unknown-xyz/1").status_code == 404


def test_development_redirects_to_frontend(dev_config) -> None:
    client = TestClient(create_app(dev_config), follow_redirects=False)
    resp = client.get("/bookings/42?tab=2&sort=desc")
    assert resp.status_code == 302
    assert resp.headers["location"] == "http://frontend.test/bookings/42?tab=2&sort=desc"


def test_production_non_get_fallback_is_json_404(prod_config) -> None:
    client = TestClient(create_app(prod_config))
    resp = client.post("/bookings/42")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Not found"}


def test_development_non_get_fallback_is_json_404(dev_config) -> None:
    client = TestClient(create_app(dev_config), follow_redirects=False)
    resp = client.post("/somewhere")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Not found"}
