from __future__ import annotations

from pathlib import Path

import pytest

from config.constants import ProtocolVariant
from config.settings import MonitoringSettings, Settings, StorageSettings
from monitoring.prober import StatusProber
from monitoring.reconciler import LabelReconciler
from monitoring.scheduler import GuildMonitorScheduler
from storage.snapshot import ConfigSnapshot
from storage.store import ConfigStore
from tests.fakes import FakeChecker
from utils.reporting import ErrorReporter


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        monitoring=MonitoringSettings(
            check_interval=10,
            probe_timeout=0.05,
            probe_deadline=0.2,
            enable_srv=False,
        ),
        storage=StorageSettings(data_file=tmp_path / "servers.json"),
        shutdown_timeout=1.0,
    )


@pytest.fixture()
def reporter() -> ErrorReporter:
    return ErrorReporter("Test")


@pytest.fixture()
def checker() -> FakeChecker:
    return FakeChecker()


@pytest.fixture()
def prober(settings: Settings, checker: FakeChecker) -> StatusProber:
    return StatusProber(
        settings=settings,
        checkers={ProtocolVariant.JAVA: checker, ProtocolVariant.BEDROCK: checker},
    )


@pytest.fixture()
def reconciler(settings: Settings, reporter: ErrorReporter) -> LabelReconciler:
    return LabelReconciler(reporter=reporter, settings=settings)


@pytest.fixture()
def snapshot() -> ConfigSnapshot:
    return ConfigSnapshot()


@pytest.fixture()
def store(settings: Settings, reporter: ErrorReporter) -> ConfigStore:
    return ConfigStore(reporter=reporter, settings=settings)


@pytest.fixture()
def scheduler(
    snapshot: ConfigSnapshot,
    prober: StatusProber,
    reconciler: LabelReconciler,
    reporter: ErrorReporter,
    settings: Settings,
) -> GuildMonitorScheduler:
    return GuildMonitorScheduler(snapshot, prober, reconciler, reporter=reporter, settings=settings)
