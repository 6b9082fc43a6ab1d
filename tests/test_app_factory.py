from __future__ import annotations

from types import SimpleNamespace

import pytest

from config import get_settings_module
from src.event_roster.event_roster.core.enums import EntityKind
from src.event_roster.event_roster.importing.entity import PARTICIPANT, STAFF
from src.event_roster.event_roster.main import create_app


@pytest.mark.parametrize(
    "app_env,expected",
    [
        ("production", "config.production"),
        ("PROD", "config.production"),
        ("test", "config.testing"),
        ("development", "config.development"),
        ("staging", "config.development"),
    ],
)
def test_settings_module_follows_app_env(monkeypatch, app_env, expected):
    monkeypatch.delenv("EVENT_ROSTER_SETTINGS", raising=False)
    monkeypatch.setenv("APP_ENV", app_env)

    assert get_settings_module() == expected


def test_explicit_settings_module_wins(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("EVENT_ROSTER_SETTINGS", "config.testing")

    assert get_settings_module() == "config.testing"


def test_create_app_wires_import_routes(monkeypatch, make_service):
    monkeypatch.delenv("EVENT_ROSTER_SETTINGS", raising=False)
    monkeypatch.setenv("APP_ENV", "testing")
    container = SimpleNamespace(
        import_services={
            EntityKind.PARTICIPANT: make_service(PARTICIPANT),
            EntityKind.STAFF: make_service(STAFF),
        }
    )

    app = create_app(container)

    assert app.secret_key == "test-secret"
    assert app.config["MAX_CONTENT_LENGTH"] == 64 * 1024 + 64 * 1024
    res = app.test_client().get("/import/staff/state")
    assert res.status_code == 200
    assert res.get_json()["state"]["stage"] == "UPLOAD"
