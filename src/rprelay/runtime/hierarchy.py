# src/rprelay/runtime/hierarchy.py

"""
Tracks which suites are open and which remote item each live suite or test maps to.
"""

import structlog
from attrs import field, mutable

from rprelay.runtime.events import SuiteInfo, TestInfo
from rprelay.telemetry import StructLogger

log: StructLogger = structlog.get_logger("rprelay.runtime.hierarchy")


@mutable(slots=True)
class HierarchyTracker:
    """
    Holds the open-suite stack and the key -> remote id maps for one run.

    Entries are keyed by the node's ``key`` (framework identity), so two
    suites sharing a display title never overwrite each other. A suite's
    entry is dropped when it closes and is never consulted again.
    """

    _stack: list[SuiteInfo] = field(factory=list, init=False)
    _suite_ids: dict[str, str] = field(factory=dict, init=False)
    _test_ids: dict[str, str] = field(factory=dict, init=False)

    @property
    def depth(self) -> int:
        return len(self._stack)

    @property
    def open_suites(self) -> tuple[SuiteInfo, ...]:
        return tuple(self._stack)

    def enter_suite(self, suite: SuiteInfo, item_id: str | None) -> None:
        """Pushes a suite, recording its id only if the remote create succeeded."""
        self._stack.append(suite)
        if item_id is not None:
            self._suite_ids[suite.key] = item_id
        log.debug("Entered suite", suite=suite.key, item_id=item_id, depth=self.depth)

    def exit_suite(self, suite: SuiteInfo) -> str | None:
        """Pops the innermost suite and forgets its id, returning it."""
        if not self._stack:
            log.debug("Suite end with no open suite", suite=suite.key)
        else:
            top = self._stack.pop()
            if top is not suite:
                log.warning("Closed suite is not the innermost open suite", expected=top.key, got=suite.key)
        item_id = self._suite_ids.pop(suite.key, None)
        log.debug("Exited suite", suite=suite.key, item_id=item_id, depth=self.depth)
        return item_id

    def suite_id(self, suite: SuiteInfo) -> str | None:
        return self._suite_ids.get(suite.key)

    def current_parent_id(self) -> str | None:
        """Id of the innermost open suite, or None if there is none or it was never created."""
        if not self._stack:
            return None
        return self._suite_ids.get(self._stack[-1].key)

    def record_test(self, test: TestInfo, item_id: str | None) -> None:
        if item_id is not None:
            self._test_ids[test.key] = item_id

    def test_id(self, test: TestInfo) -> str | None:
        return self._test_ids.get(test.key)

    def finish_test(self, test: TestInfo) -> str | None:
        return self._test_ids.pop(test.key, None)


# 🔼⚙️
