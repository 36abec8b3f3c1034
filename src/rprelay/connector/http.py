#
# src/rprelay/connector/http.py
#
"""
Synchronous ReportPortal connector built on httpx.
"""

import json
import time
from typing import Any

import httpx
import structlog

from rprelay.config.models import ReporterConfig
from rprelay.exceptions import ConnectorError
from rprelay.protocols import ConnectorResult, ItemSpec, ItemType, LogLevel, ReportingConnector, Status
from rprelay.telemetry import StructLogger

log: StructLogger = structlog.get_logger("rprelay.connector.http")

ITEM_TYPE_MAP = {
    ItemType.SUITE: "SUITE",
    ItemType.TEST: "STEP",
}

# The backend has no "failed"/"skipped" levels.
LOG_LEVEL_MAP = {
    LogLevel.FAILED: "error",
    LogLevel.SKIPPED: "info",
}


def _timestamp() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


class HttpReportingConnector(ReportingConnector):
    """
    Talks to the ReportPortal v1 API with one blocking httpx client.

    Every public call returns a ConnectorResult; transport errors, error
    statuses and malformed responses become failed results.
    """

    def __init__(self, config: ReporterConfig, client: httpx.Client | None = None):
        self.config = config
        self.launch_id: str | None = None
        self._client = client or httpx.Client(
            base_url=config.base_url,
            headers={"Authorization": f"Bearer {config.api_key}"},
            timeout=config.timeout,
            verify=config.verify_ssl,
        )

    @property
    def _log(self) -> StructLogger:
        # bound per call; logging may be configured after construction
        return log.bind(endpoint=self.config.endpoint, project=self.config.project)

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        self._log.debug("Sending request", method=method, path=path)
        try:
            response = self._client.request(method, path, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ConnectorError(
                f"API error ({e.response.status_code}): {e.response.text}", operation=f"{method} {path}", details=e
            ) from e
        except httpx.HTTPError as e:
            raise ConnectorError(
                f"Request to {self.config.endpoint} failed: {e}", operation=f"{method} {path}", details=e
            ) from e

        if not response.content:
            return {}
        try:
            data = response.json()
        except json.JSONDecodeError as e:
            raise ConnectorError("Response was not valid JSON", operation=f"{method} {path}", details=e) from e
        return data if isinstance(data, dict) else {}

    def _create(self, method: str, path: str, payload: dict[str, Any]) -> ConnectorResult:
        try:
            data = self._request(method, path, payload)
        except ConnectorError as e:
            return ConnectorResult.failed(str(e))
        item_id = data.get("id")
        if not item_id:
            return ConnectorResult.failed(f"Response to {method} {path} has no 'id'")
        return ConnectorResult(success=True, item_id=str(item_id))

    def _update(self, method: str, path: str, payload: dict[str, Any]) -> ConnectorResult:
        try:
            data = self._request(method, path, payload)
        except ConnectorError as e:
            return ConnectorResult.failed(str(e))
        return ConnectorResult(success=True, message=data.get("message"))

    def start_launch(self) -> ConnectorResult:
        payload = {
            "name": self.config.launch_name,
            "description": self.config.launch_description,
            "startTime": _timestamp(),
            "mode": "DEFAULT",
            "attributes": [{"key": k, "value": v} for k, v in self.config.attributes.items()],
        }
        result = self._create("POST", "/launch", payload)
        if result.success:
            self.launch_id = result.item_id
        return result

    def finish_launch(self, launch_id: str | None) -> ConnectorResult:
        if launch_id is None:
            return ConnectorResult.failed("No launch id to finish")
        return self._update("PUT", f"/launch/{launch_id}/finish", {"endTime": _timestamp()})

    def _item_payload(self, spec: ItemSpec) -> dict[str, Any]:
        if spec.launch is not None:
            self.launch_id = spec.launch
        return {
            "name": spec.name,
            "description": spec.description,
            "launchUuid": spec.launch,
            "type": ITEM_TYPE_MAP[spec.type],
            "startTime": _timestamp(),
        }

    def start_root_item(self, spec: ItemSpec) -> ConnectorResult:
        return self._create("POST", "/item", self._item_payload(spec))

    def start_child_item(self, spec: ItemSpec, parent_id: str | None) -> ConnectorResult:
        if parent_id is None:
            return ConnectorResult.failed(f"No parent id for item '{spec.name}'")
        return self._create("POST", f"/item/{parent_id}", self._item_payload(spec))

    def finish_item(self, status: Status | str, item_id: str | None) -> ConnectorResult:
        if item_id is None:
            return ConnectorResult.failed("No item id to finish")
        try:
            wire_status = Status(status).value.upper()
        except ValueError:
            return ConnectorResult.failed(f"Unsupported status '{status}'")
        payload = {
            "endTime": _timestamp(),
            "status": wire_status,
            "launchUuid": self.launch_id,
        }
        return self._update("PUT", f"/item/{item_id}", payload)

    def send_log(self, item_id: str | None, level: LogLevel, message: str) -> ConnectorResult:
        if item_id is None:
            return ConnectorResult.failed("No item id to log against")
        payload = {
            "launchUuid": self.launch_id,
            "itemUuid": item_id,
            "time": _timestamp(),
            "message": message,
            "level": LOG_LEVEL_MAP.get(level, LogLevel(level).value),
        }
        return self._create("POST", "/log", payload)


# 🔼⚙️
