# tests/conftest.py

from pathlib import Path
from typing import Any

import pytest

from rprelay.config import RelayConfig, load_config
from rprelay.phase import PhaseResolver
from rprelay.protocols import ConnectorResult, ItemSpec, LogLevel, ReportingConnector, Status
from rprelay.runtime import EventTranslator, HierarchyTracker


class RecordingConnector(ReportingConnector):
    """
    In-memory connector that records every call.

    Item ids are the item names, suffixed with ``~n`` when a name repeats,
    so expected call lists stay readable.
    """

    def __init__(self, fail: set[str] | None = None, raise_on: set[str] | None = None):
        self.calls: list[tuple[Any, ...]] = []
        self.fail = fail or set()
        self.raise_on = raise_on or set()
        self.closed = False
        self._seen: dict[str, int] = {}
        self._launches = 0

    def _outcome(self, operation: str, item_id: str | None = None) -> ConnectorResult:
        if operation in self.raise_on:
            raise RuntimeError(f"{operation} exploded")
        if operation in self.fail:
            return ConnectorResult.failed(f"{operation} failed")
        return ConnectorResult(success=True, item_id=item_id)

    def _new_id(self, name: str) -> str:
        count = self._seen.get(name, 0) + 1
        self._seen[name] = count
        return name if count == 1 else f"{name}~{count}"

    def start_launch(self) -> ConnectorResult:
        self.calls.append(("start_launch",))
        self._launches += 1
        return self._outcome("start_launch", f"launch-{self._launches}")

    def finish_launch(self, launch_id: str | None) -> ConnectorResult:
        self.calls.append(("finish_launch", launch_id))
        return self._outcome("finish_launch")

    def start_root_item(self, spec: ItemSpec) -> ConnectorResult:
        self.calls.append(("start_root_item", spec.name, spec.type.value))
        return self._outcome("start_root_item", self._new_id(spec.name))

    def start_child_item(self, spec: ItemSpec, parent_id: str | None) -> ConnectorResult:
        self.calls.append(("start_child_item", spec.name, spec.type.value, parent_id))
        return self._outcome("start_child_item", self._new_id(spec.name))

    def finish_item(self, status: Status | str, item_id: str | None) -> ConnectorResult:
        self.calls.append(("finish_item", Status(status).value, item_id))
        return self._outcome("finish_item")

    def send_log(self, item_id: str | None, level: LogLevel, message: str) -> ConnectorResult:
        self.calls.append(("send_log", item_id, LogLevel(level).value, message))
        return self._outcome("send_log")

    def close(self) -> None:
        self.closed = True

    def operations(self) -> list[str]:
        return [call[0] for call in self.calls]


@pytest.fixture
def connector() -> RecordingConnector:
    return RecordingConnector()


@pytest.fixture
def tracker() -> HierarchyTracker:
    return HierarchyTracker()


@pytest.fixture
def translator(connector: RecordingConnector, tracker: HierarchyTracker) -> EventTranslator:
    """Translator for a single-process run."""
    return EventTranslator(connector, tracker, PhaseResolver(None))


@pytest.fixture
def config_data(tmp_path: Path) -> dict[str, Any]:
    """Inline config; the launch id file lives in the test's tmp dir."""
    return {
        "reporter": {
            "endpoint": "https://rp.example.com",
            "project": "demo",
            "api_key": "secret-token",
            "launch_name": "unit",
            "attributes": {"suite": "unit"},
        },
        "phase": {"launch_id_file": str(tmp_path / "rp_launch_id")},
    }


@pytest.fixture
def relay_config(config_data: dict[str, Any]) -> RelayConfig:
    return load_config(config_data, environ={})


@pytest.fixture
def make_connector():
    """Builds RecordingConnectors with chosen operations failing or raising."""
    return RecordingConnector
