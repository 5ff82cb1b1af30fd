from __future__ import annotations

import json

import pytest
from aiohttp.test_utils import make_mocked_request

from config.settings import Settings
from monitoring.health import HealthServer
from monitoring.scheduler import GuildMonitorScheduler
from storage.snapshot import ConfigSnapshot
from tests.fakes import make_entry
from utils.reporting import ErrorReporter


@pytest.fixture()
def health(
    scheduler: GuildMonitorScheduler, snapshot: ConfigSnapshot, reporter: ErrorReporter, settings: Settings
) -> HealthServer:
    return HealthServer(scheduler, snapshot, reporter=reporter, settings=settings, is_connected=lambda: True)


@pytest.mark.asyncio
async def test_root_is_plain_ok(health: HealthServer) -> None:
    response = await health._handle_root(make_mocked_request("GET", "/"))

    assert response.status == 200
    assert response.text == "OK"


@pytest.mark.asyncio
async def test_health_reports_configuration(health: HealthServer, snapshot: ConfigSnapshot) -> None:
    snapshot.put_server("1", "a.example.com", make_entry())
    snapshot.put_server("1", "b.example.com", make_entry())

    response = await health._handle_status(make_mocked_request("GET", "/status"))
    body = json.loads(response.body)

    assert response.status == 200
    assert body["status"] == "healthy"
    assert body["configured_guilds"] == 1
    assert body["configured_servers"] == 2
    assert body["requests_served"] == 1


def test_disconnected_gateway_is_degraded(
    scheduler: GuildMonitorScheduler, snapshot: ConfigSnapshot, settings: Settings
) -> None:
    health = HealthServer(scheduler, snapshot, settings=settings, is_connected=lambda: False)

    report = health.build_health()

    assert report["status"] == "degraded"
    assert report["errors"] is None
