import sys
from pathlib import Path

import pytest


API_SRC = Path(__file__).resolve().parents[1] / "src"
if str(API_SRC) not in sys.path:
    sys.path.insert(0, str(API_SRC))

from navigatio_api import db  # noqa: E402
from navigatio_api.config import Environment, ServerConfig  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_db_client(monkeypatch) -> None:
    """Start every test without a connected MongoDB client."""

    monkeypatch.setattr(db, "_client", None)


@pytest.fixture
def uploads_dir(tmp_path: Path) -> Path:
    path = tmp_path / "uploads"
    path.mkdir()
    (path / "report.txt").write_text("quarterly report", encoding="utf-8")
    return path


@pytest.fixture
def build_dir(tmp_path: Path) -> Path:
    path = tmp_path / "build"
    (path / "static").mkdir(parents=True)
    (path / "index.html").write_text("<html>navigatio</html>", encoding="utf-8")
    (path / "static" / "app.js").write_text("console.log(1)", encoding="utf-8")
    return path


@pytest.fixture
def dev_config(uploads_dir: Path, build_dir: Path) -> ServerConfig:
    return ServerConfig(
        environment=Environment.DEVELOPMENT,
        uploads_dir=uploads_dir,
        frontend_build_dir=build_dir,
        dev_redirect_origin="http://frontend.test",
        max_request_bytes=1024,
    )


@pytest.fixture
def prod_config(uploads_dir: Path, build_dir: Path) -> ServerConfig:
    return ServerConfig(
        environment=Environment.PRODUCTION,
        uploads_dir=uploads_dir,
        frontend_build_dir=build_dir,
        max_request_bytes=1024,
    )
