"""Tests for the FastAPI status endpoints.

Uses TestClient against history written straight to a temporary data path;
no checks run and the scheduler is disabled.
"""

import os
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from fastapi.testclient import TestClient

from statusmonitor.config import Settings
from statusmonitor.main import create_app
from statusmonitor.services.monitor import MonitorService

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)

CONFIG = """\
title: Test Status
checks:
  - name: Web
    url: https://web.test
  - name: Database
    type: tcp
    host: db.test
    port: 5432
    maintenance: Upgrading
  - name: DNS
    type: dns
    domain: example.test
"""


@pytest.fixture
def settings(tmp_path: Any) -> Settings:
    config = tmp_path / "config.yml"
    config.write_text(CONFIG)
    site = tmp_path / "site"
    site.mkdir()
    (site / "index.html").write_text("<h1>generated</h1>")
    return Settings(config_path=str(config), data_path=str(tmp_path), site_path=str(site))


@pytest.fixture
def monitor(settings: Settings, make_outcome: Any) -> MonitorService:
    monitor = MonitorService(settings)
    monitor.store.record("web", make_outcome("up", target_id="web", timestamp=datetime(2026, 9, 30, 23, tzinfo=timezone.utc)))
    monitor.store.record("web", make_outcome("down", target_id="web", timestamp=NOW - timedelta(minutes=10)))
    monitor.store.record("web", make_outcome("up", target_id="web", response_time_ms=120, timestamp=NOW))
    monitor.store.record("database", make_outcome("maintenance", target_id="database", timestamp=NOW))
    return monitor


@pytest.fixture
def client(settings: Settings, monitor: MonitorService) -> TestClient:
    app = create_app(settings, monitor=monitor, run_scheduler=False)
    with TestClient(app) as tc:
        yield tc  # type: ignore[misc]


class TestOverview:
    def test_counts_and_order(self, client: TestClient) -> None:
        resp = client.get("/api/status")

        assert resp.status_code == 200
        body = resp.json()
        assert body["total_targets"] == 3
        assert body["targets_up"] == 1
        assert body["targets_maintenance"] == 1
        assert body["targets_unknown"] == 1
        assert [t["id"] for t in body["targets"]] == ["web", "database", "dns"]
        assert body["targets"][1]["maintenance"] == "Upgrading"
        assert body["targets"][0]["endpoint"] == "https://web.test"

    def test_invalid_config_is_unavailable(self, settings: Settings, tmp_path: Any) -> None:
        (tmp_path / "config.yml").write_text("checks:\n  - url: https://nameless.test\n")
        app = create_app(settings, monitor=MonitorService(settings), run_scheduler=False)

        with TestClient(app) as tc:
            resp = tc.get("/api/status")

        assert resp.status_code == 503


class TestTargetEndpoints:
    def test_status_snapshot(self, client: TestClient) -> None:
        resp = client.get("/api/targets/web/status")

        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "up"
        assert body["responseTime"] == 120
        assert set(body) == {"lastCheck", "status", "statusCode", "responseTime", "timestamp", "error"}

    def test_status_without_checks(self, client: TestClient) -> None:
        assert client.get("/api/targets/dns/status").status_code == 404

    def test_unknown_target(self, client: TestClient) -> None:
        assert client.get("/api/targets/nope/status").status_code == 404
        assert client.get("/api/targets/nope/metrics").status_code == 404

    def test_history_oldest_first(self, client: TestClient) -> None:
        resp = client.get("/api/targets/web/history")

        assert resp.status_code == 200
        assert [e["status"] for e in resp.json()] == ["up", "down", "up"]

    def test_history_month(self, client: TestClient) -> None:
        resp = client.get("/api/targets/web/history/2026-09")

        assert resp.status_code == 200
        assert len(resp.json()) == 1
        assert client.get("/api/targets/web/history/2025-01").status_code == 404

    def test_metrics(self, client: TestClient) -> None:
        resp = client.get("/api/targets/web/metrics")

        assert resp.status_code == 200
        body = resp.json()
        assert body["uptime_percent"] == 66.67
        assert body["incident_count"] == 1
        assert body["trend"] == "flat"

    def test_metrics_without_history(self, client: TestClient) -> None:
        body = client.get("/api/targets/dns/metrics").json()
        assert body["uptime_percent"] == 100.0
        assert body["checks"] == 0


class TestBadgeEndpoint:
    def test_up_badge(self, client: TestClient) -> None:
        resp = client.get("/badge/web.svg")

        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("image/svg+xml")
        assert "#0a0" in resp.text

    def test_maintenance_badge(self, client: TestClient) -> None:
        assert "#fa0" in client.get("/badge/database.svg").text

    def test_badge_without_checks(self, client: TestClient) -> None:
        resp = client.get("/badge/dns.svg")
        assert "unknown" in resp.text
        assert "#d00" in resp.text


class TestAppShell:
    def test_health(self, client: TestClient) -> None:
        resp = client.get("/health")
        assert resp.json() == {"status": "healthy", "scheduler": False}

    def test_serves_generated_site(self, client: TestClient) -> None:
        resp = client.get("/")
        assert resp.status_code == 200
        assert "generated" in resp.text

    def test_index_html_alias(self, client: TestClient) -> None:
        resp = client.get("/index.html")
        assert resp.status_code == 200
        assert "generated" in resp.text

    def test_index_missing_before_first_render(self, tmp_path: Any, monitor: MonitorService) -> None:
        settings = Settings(
            config_path=str(tmp_path / "config.yml"),
            data_path=str(tmp_path),
            site_path=str(tmp_path / "empty-site"),
        )
        app = create_app(settings, monitor=monitor, run_scheduler=False)

        with TestClient(app) as tc:
            assert tc.get("/").status_code == 404

    def test_published_json_served(self, client: TestClient) -> None:
        resp = client.get("/api/web/status.json")

        assert resp.status_code == 200
        assert resp.json()["status"] == "up"
        assert client.get("/api/web/history/2026-10.json").status_code == 200

    def test_service_pages_served(self, client: TestClient, settings: Settings) -> None:
        service_dir = os.path.join(settings.site_path, "service")
        with open(os.path.join(service_dir, "web.html"), "w") as f:
            f.write("<h1>web page</h1>")

        resp = client.get("/service/web.html")

        assert resp.status_code == 200
        assert "web page" in resp.text


class TestSiteExposure:
    @pytest.fixture
    def shared_root(self, tmp_path: Any) -> Settings:
        """Site, data and config all in one directory, as in a checkout."""
        (tmp_path / "config.yml").write_text(CONFIG)
        (tmp_path / ".env").write_text("STATUSMONITOR_WEBHOOK_URL=https://hooks.test/secret\n")
        (tmp_path / "index.html").write_text("<h1>generated</h1>")
        return Settings(config_path=str(tmp_path / "config.yml"), data_path=str(tmp_path), site_path=str(tmp_path))

    @pytest.mark.parametrize("path", ["/config.yml", "/.env", "/api/../config.yml", "/service/../.env"])
    def test_non_output_files_not_served(self, shared_root: Settings, path: str) -> None:
        app = create_app(shared_root, monitor=MonitorService(shared_root), run_scheduler=False)

        with TestClient(app) as tc:
            resp = tc.get(path)
            assert tc.get("/").status_code == 200

        assert resp.status_code == 404
        assert "secret" not in resp.text
        assert "checks:" not in resp.text

    def test_defaults_keep_outputs_out_of_working_directory(self) -> None:
        assert Settings.model_fields["site_path"].default == "site"
        assert Settings.model_fields["data_path"].default == "site"
