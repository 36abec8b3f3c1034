# src/rprelay/protocols.py

"""
Runtime protocols and data structures shared by the reporter and its connectors.
"""

from enum import Enum
from typing import Protocol, runtime_checkable

from attrs import define, field


class ItemType(str, Enum):
    """Kinds of test items the reporting backend knows about."""

    SUITE = "SUITE"
    TEST = "TEST"


class Status(str, Enum):
    """Terminal statuses for items."""

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


class LogLevel(str, Enum):
    """Log levels accepted by ``send_log``."""

    TRACE = "trace"
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "fatal"
    FAILED = "failed"
    SKIPPED = "skipped"


@define(frozen=True, slots=True)
class ItemSpec:
    """Parameters for creating a suite or test item."""

    name: str
    launch: str | None
    description: str = ""
    type: ItemType = field(default=ItemType.TEST)


@define(frozen=True, slots=True)
class ConnectorResult:
    """
    Structured outcome of a single connector call.

    ``item_id`` carries the identifier returned by create calls (launch or item).
    Failed calls set ``success`` to False and describe the problem in ``message``.
    """

    success: bool
    item_id: str | None = None
    message: str | None = None

    @classmethod
    def failed(cls, message: str) -> "ConnectorResult":
        return cls(success=False, message=message)


@runtime_checkable
class ReportingConnector(Protocol):
    """
    Protocol for a synchronous client of the remote reporting backend.

    Implementations must not raise for remote failures; they report them
    through ``ConnectorResult``.
    """

    def start_launch(self) -> ConnectorResult: ...

    def finish_launch(self, launch_id: str | None) -> ConnectorResult: ...

    def start_root_item(self, spec: ItemSpec) -> ConnectorResult: ...

    def start_child_item(self, spec: ItemSpec, parent_id: str | None) -> ConnectorResult: ...

    def finish_item(self, status: Status | str, item_id: str | None) -> ConnectorResult: ...

    def send_log(self, item_id: str | None, level: LogLevel, message: str) -> ConnectorResult: ...

    def close(self) -> None: ...


# 🔼⚙️
