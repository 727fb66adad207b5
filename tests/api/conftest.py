import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(
        """
timezone = "UTC"

[generation]
unresolved = "keep"

[web]
enabled = true
host = "127.0.0.1"
port = 5000
""",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def client(tmp_path, config_file, monkeypatch):
    monkeypatch.setenv("CONFIG_FILE", str(config_file))
    monkeypatch.setenv("PROMPTOR_DB_PATH", str(tmp_path / "promptor.db"))

    from promptor.api import create_app

    app = create_app()
    with TestClient(app) as client:
        yield client
