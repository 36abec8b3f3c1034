# src/rprelay/runtime/translator.py

"""
Turns test framework lifecycle events into reporting connector calls.
"""

from collections.abc import Callable

import structlog

from rprelay.exceptions import RprelayError
from rprelay.phase import PhaseResolver
from rprelay.protocols import (
    ConnectorResult,
    ItemSpec,
    ItemType,
    LogLevel,
    ReportingConnector,
    Status,
)
from rprelay.runtime.events import TEST_FAILED, EventKind, LifecycleEvent, SuiteInfo, TestInfo
from rprelay.runtime.hierarchy import HierarchyTracker
from rprelay.telemetry import StructLogger

log: StructLogger = structlog.get_logger("rprelay.runtime.translator")


class EventTranslator:
    """
    State machine from lifecycle callbacks to create/finish/log calls.

    Handlers never raise. A failed remote call is logged and bookkeeping
    carries on as if the call had returned no identifier, so later events
    only ever address a missing id instead of crashing the host run.
    """

    def __init__(
        self,
        connector: ReportingConnector,
        tracker: HierarchyTracker,
        phase_resolver: PhaseResolver,
        launch_id: str | None = None,
    ):
        self.connector = connector
        self.tracker = tracker
        self.phase_resolver = phase_resolver
        self._launch_id = launch_id
        self._handlers: dict[EventKind, Callable[[LifecycleEvent], None]] = {
            EventKind.RUN_START: lambda e: self.on_run_start(),
            EventKind.SUITE_START: lambda e: self.on_suite_start(e.node),
            EventKind.TEST_START: lambda e: self.on_test_start(e.node),
            EventKind.TEST_PASS: lambda e: self.on_test_pass(e.node),
            EventKind.TEST_FAIL: lambda e: self.on_test_fail(e.node, e.error),
            EventKind.TEST_PENDING: lambda e: self.on_test_pending(e.node),
            EventKind.TEST_END: lambda e: self.on_test_end(e.node),
            EventKind.SUITE_END: lambda e: self.on_suite_end(e.node),
            EventKind.RUN_END: lambda e: self.on_run_end(),
        }
        log.debug("EventTranslator initialized.", phase=phase_resolver.phase.value, launch_id=launch_id)

    @property
    def launch_id(self) -> str | None:
        return self._launch_id

    def dispatch(self, event: LifecycleEvent) -> None:
        """Routes one event to its handler."""
        handler = self._handlers.get(event.kind)
        if handler is None:
            log.debug("Ignoring unhandled event", kind=event.kind)
            return
        handler(event)

    def _call(self, operation: str, func: Callable[..., ConnectorResult], *args, **context) -> ConnectorResult:
        """Runs one connector call, converting anything it raises into a failed result."""
        try:
            result = func(*args)
        except Exception as e:
            log.error("Connector raised unexpectedly", operation=operation, error=str(e), exc_info=True, **context)
            return ConnectorResult.failed(str(e))
        if not result.success:
            log.warning("Remote call failed", operation=operation, reason=result.message, **context)
        return result

    def _item_spec(self, node: SuiteInfo | TestInfo, item_type: ItemType) -> ItemSpec:
        return ItemSpec(
            name=node.title,
            launch=self._launch_id,
            description=node.full_title(),
            type=item_type,
        )

    def _start_item(self, node: SuiteInfo | TestInfo, item_type: ItemType) -> ConnectorResult:
        spec = self._item_spec(node, item_type)
        if self.tracker.depth == 0:
            return self._call("start_root_item", self.connector.start_root_item, spec, key=node.key)
        parent_id = self.tracker.current_parent_id()
        return self._call(
            "start_child_item", self.connector.start_child_item, spec, parent_id, key=node.key, parent_id=parent_id
        )

    # --- Launch ---

    def on_run_start(self) -> None:
        if not self.phase_resolver.creates_launch:
            log.info("Reusing persisted launch", launch_id=self._launch_id)
            return

        result = self._call("start_launch", self.connector.start_launch)
        if not result.success:
            return

        self._launch_id = result.item_id
        log.info("Launch started", launch_id=self._launch_id)
        if self._launch_id is not None and self.phase_resolver.persists_launch_id:
            try:
                self.phase_resolver.persist_launch_id(self._launch_id)
            except RprelayError as e:
                log.error("Launch id could not be persisted for later phases", error=str(e))

    def on_run_end(self) -> None:
        if not self.phase_resolver.finishes_launch:
            log.info("Leaving launch open for a later phase", launch_id=self._launch_id)
            return
        result = self._call("finish_launch", self.connector.finish_launch, self._launch_id, launch_id=self._launch_id)
        if result.success:
            log.info("Launch finished", launch_id=self._launch_id)

    # --- Suites ---

    def on_suite_start(self, suite: SuiteInfo) -> None:
        if suite.is_root:
            return
        result = self._start_item(suite, ItemType.SUITE)
        self.tracker.enter_suite(suite, result.item_id if result.success else None)

    def on_suite_end(self, suite: SuiteInfo) -> None:
        if suite.is_root:
            return
        # Only direct tests count; failures in nested suites stay with those suites.
        failed = any(test.state == TEST_FAILED for test in suite.tests)
        status = Status.FAILED if failed else Status.PASSED
        item_id = self.tracker.suite_id(suite)
        self._call("finish_item", self.connector.finish_item, status, item_id, key=suite.key, status=status.value)
        self.tracker.exit_suite(suite)

    # --- Tests ---

    def on_test_start(self, test: TestInfo) -> None:
        result = self._start_item(test, ItemType.TEST)
        self.tracker.record_test(test, result.item_id if result.success else None)

    def on_test_pass(self, test: TestInfo) -> None:
        log.debug("Test passed", key=test.key)

    def on_test_fail(self, test: TestInfo, error: str | None) -> None:
        item_id = self.tracker.test_id(test)
        self._call(
            "send_log",
            self.connector.send_log,
            item_id,
            LogLevel.FAILED,
            error or "",
            key=test.key,
        )

    def on_test_pending(self, test: TestInfo) -> None:
        result = self._start_item(test, ItemType.TEST)
        if not result.success:
            return
        self._call("send_log", self.connector.send_log, result.item_id, LogLevel.SKIPPED, test.title, key=test.key)
        self._call("finish_item", self.connector.finish_item, Status.SKIPPED, result.item_id, key=test.key)

    def on_test_end(self, test: TestInfo) -> None:
        if test.state is None:
            # Pending tests were already finished by on_test_pending.
            log.debug("Test end without state, nothing to finish", key=test.key)
            return
        item_id = self.tracker.finish_test(test)
        self._call("finish_item", self.connector.finish_item, test.state, item_id, key=test.key, status=test.state)


# 🔼⚙️
