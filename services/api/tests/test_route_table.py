"""Route table construction, precedence and dispatch."""

import pytest
from starlette.responses import PlainTextResponse
from starlette.routing import Route, Router
from starlette.testclient import TestClient

from navigatio_api.errors import DuplicatePrefixError, ShadowedPrefixError
from navigatio_api.main import create_app
from navigatio_api.routes import (
    API_ROUTES,
    LIVENESS_PAYLOAD,
    RouteEntry,
    RouteTable,
    api_route_table,
    liveness,
)


def _router(text: str) -> Router:
    async def endpoint(request):
        return PlainTextResponse(f"{text}:{request.path_params.get('rest', '')}")

    return Router(routes=[Route("/", endpoint), Route("/{rest:path}", endpoint)])


def test_duplicate_prefix_rejected() -> None:
    with pytest.raises(DuplicatePrefixError):
        RouteTable.build(
            [
                RouteEntry("/api/users", "users", _router("a")),
                RouteEntry("/api/users", "users_v2", _router("b")),
            ]
        )


def test_shorter_mount_shadowing_later_prefix_rejected() -> None:
    with pytest.raises(ShadowedPrefixError):
        RouteTable.build(
            [
                RouteEntry("/api", "catch_all", _router("a")),
                RouteEntry("/api/wallets", "wallets", _router("b")),
            ]
        )


def test_exact_entry_does_not_shadow() -> None:
    table = RouteTable.build(
        [
            RouteEntry("/api", "liveness", liveness, exact=True),
            RouteEntry("/api/wallets", "wallets", _router("b")),
        ]
    )
    assert table.prefixes() == ("/api", "/api/wallets")


def test_similar_prefixes_are_not_shadowing() -> None:
    table = RouteTable.build(
        [
            RouteEntry("/api/guest-sightseeing", "guest", _router("a")),
            RouteEntry("/api/guest-sightseeing-test", "guest_test", _router("b")),
        ]
    )
    assert len(table) == 2


def test_canonical_table_order_and_liveness_last() -> None:
    table = api_route_table()
    assert table.prefixes() == tuple(p for p, _ in API_ROUTES) + ("/api",)
    assert table.entries[-1].exact


def test_route_registration_logged(dev_config, caplog) -> None:
    with caplog.at_level("INFO"):
        create_app(dev_config)
    logged = [
        r.prefix for r in caplog.records if r.getMessage() == "route_registered"
    ]
    assert logged == [p for p, _ in API_ROUTES] + ["/api"]


def test_liveness_is_idempotent(prod_config) -> None:
    client = TestClient(create_app(prod_config))
    bodies = [client.get("/api").json() for _ in range(3)]
    assert bodies == [LIVENESS_PAYLOAD] * 3
    assert client.post("/api").json() == LIVENESS_PAYLOAD


def test_collaborators_own_their_prefix(dev_config) -> None:
    app = create_app(
        dev_config,
        {
            "guest_sightseeing": _router("guest"),
            "guest_sightseeing_test": _router("guest-test"),
        },
    )
    client = TestClient(app)
    assert client.get("/api/guest-sightseeing/tours").text == "guest:tours"
    assert client.get("/api/guest-sightseeing-test/x").text == "guest-test:x"


def test_missing_collaborator_answers_503(dev_config) -> None:
    client = TestClient(create_app(dev_config))
    resp = client.get("/api/wallets/balance")
    assert resp.status_code == 503
    assert resp.json() == {
        "success": False,
        "error": "wallets module is not available",
    }


def test_diagnostics_router_mounted(dev_config) -> None:
    client = TestClient(create_app(dev_config))
    assert client.get("/api/test/").json() == {
        "success": True,
        "message": "Test route is working",
    }
    health = client.get("/api/test/health").json()
    assert health["db"] == "down"
    assert health["environment"] == "development"


def test_independent_app_instances(dev_config, prod_config) -> None:
    dev_app = create_app(dev_config)
    prod_app = create_app(prod_config)
    assert dev_app is not prod_app
    assert dev_app.state.config.is_development
    assert prod_app.state.config.is_production


def _collection_router(text: str) -> Router:
    async def collection(request):
        return PlainTextResponse(f"{text}:{request.method}")

    return Router(routes=[Route("/", collection, methods=["GET", "POST"])])


@pytest.mark.parametrize("config_name", ["dev_config", "prod_config"])
def test_bare_prefix_reaches_collaborator(config_name, request) -> None:
    config = request.getfixturevalue(config_name)
    client = TestClient(
        create_app(config, {"quotes": _collection_router("quotes")}),
        follow_redirects=False,
    )
    assert client.get("/api/quotes").text == "quotes:GET"
    assert client.post("/api/quotes").text == "quotes:POST"
    assert client.get("/api/quotes/").text == "quotes:GET"


@pytest.mark.parametrize("config_name", ["dev_config", "prod_config"])
def test_bare_prefix_of_missing_collaborator_answers_503(config_name, request) -> None:
    client = TestClient(create_app(request.getfixturevalue(config_name)))
    resp = client.get("/api/wallets")
    assert resp.status_code == 503
    assert resp.json()["error"] == "wallets module is not available"


@pytest.mark.parametrize("config_name", ["dev_config", "prod_config"])
def test_diagnostics_bare_prefix(config_name, request) -> None:
    client = TestClient(create_app(request.getfixturevalue(config_name)))
    resp = client.get("/api/test")
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": "Test route is working"}


def test_sub_router_method_errors_use_json_shape(prod_config) -> None:
    client = TestClient(create_app(prod_config, {"quotes": _collection_router("q")}))
    resp = client.delete("/api/quotes")
    assert resp.status_code == 405
    assert resp.json() == {"success": False, "error": "Method Not Allowed"}
    resp = client.get("/api/quotes/nope")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Not Found"}
