# src/rprelay/pytest_plugin.py

"""
pytest plugin that reports a test session to ReportPortal through rprelay.

Modules and classes become suites, test functions become tests. The plugin
stays inert unless a config source is given via ``--rp-config`` or the
``rp_config`` ini option.
"""

import logging
from pathlib import Path

import pytest
import structlog

from rprelay.exceptions import ConfigurationError
from rprelay.runtime import EventKind, Reporter, SuiteInfo, TestInfo
from rprelay.runtime.events import TEST_FAILED, TEST_PASSED
from rprelay.telemetry import StructLogger, setup_logging

log: StructLogger = structlog.get_logger("rprelay.pytest_plugin")

PLUGIN_NAME = "rprelay-reporter"


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("rprelay", "ReportPortal reporting")
    group.addoption(
        "--rp-config",
        dest="rp_config",
        default=None,
        help="Path to the rprelay config file (TOML or JSON), relative to the working directory.",
    )
    group.addoption(
        "--rp-phase",
        dest="rp_phase",
        default=None,
        help="Launch phase owned by this run: start, test, end or complete_test (default).",
    )
    group.addoption(
        "--rp-launch-id-file",
        dest="rp_launch_id_file",
        default=None,
        help="File that carries the launch id between phases.",
    )
    group.addoption(
        "--rp-disable",
        dest="rp_disable",
        action="store_true",
        default=False,
        help="Disable ReportPortal reporting even if configured.",
    )
    parser.addini("rp_config", "Path to the rprelay config file.", default="")
    parser.addini("rp_phase", "Launch phase owned by this run.", default="")
    parser.addini("rp_launch_id_file", "File that carries the launch id between phases.", default="")


def pytest_configure(config: pytest.Config) -> None:
    if config.getoption("rp_disable"):
        return
    source = config.getoption("rp_config") or config.getini("rp_config")
    if not source:
        return

    # A structlog setup made by the host project is left in place.
    configure_structlog = not structlog.is_configured()
    setup_logging(level=logging.WARNING, configure_structlog=configure_structlog)

    cwd = Path(config.invocation_params.dir)
    try:
        relay_config = Reporter.resolve_config(
            source,
            phase=config.getoption("rp_phase") or config.getini("rp_phase") or None,
            launch_id_file=config.getoption("rp_launch_id_file") or config.getini("rp_launch_id_file") or None,
            cwd=cwd,
        )
        setup_logging(
            level=relay_config.global_config.numeric_log_level,
            configure_structlog=configure_structlog,
        )
        reporter = Reporter(relay_config, cwd=cwd)
    except ConfigurationError as e:
        raise pytest.UsageError(f"rprelay: {e}") from e

    config.pluginmanager.register(RelayPlugin(reporter), PLUGIN_NAME)


def _suite_nodes(item: pytest.Item) -> list[pytest.Collector]:
    return [node for node in item.listchain() if isinstance(node, pytest.Module | pytest.Class)]


class RelayPlugin:
    """Translates pytest's hook stream into rprelay lifecycle events."""

    def __init__(self, reporter: Reporter):
        self.reporter = reporter
        self._root = SuiteInfo(title="", key="")
        self._open: list[SuiteInfo] = []
        self._tests: dict[str, TestInfo] = {}

    def _sync_suites(self, item: pytest.Item) -> SuiteInfo:
        """Closes suites the item is not part of and opens the ones it needs."""
        chain = _suite_nodes(item)
        keep = 0
        while keep < min(len(chain), len(self._open)) and self._open[keep].key == chain[keep].nodeid:
            keep += 1

        while len(self._open) > keep:
            self.reporter.emit(EventKind.SUITE_END, self._open.pop())

        parent = self._open[-1] if self._open else self._root
        for node in chain[keep:]:
            suite = SuiteInfo(title=node.name, parent=parent, key=node.nodeid)
            self.reporter.emit(EventKind.SUITE_START, suite)
            self._open.append(suite)
            parent = suite
        return parent

    def _close_suites(self) -> None:
        while self._open:
            self.reporter.emit(EventKind.SUITE_END, self._open.pop())

    @pytest.hookimpl(trylast=True)
    def pytest_sessionstart(self, session: pytest.Session) -> None:
        self.reporter.emit(EventKind.RUN_START)
        self.reporter.emit(EventKind.SUITE_START, self._root)

    @pytest.hookimpl(tryfirst=True)
    def pytest_runtest_protocol(self, item: pytest.Item, nextitem: pytest.Item | None) -> None:
        parent = self._sync_suites(item)
        self._tests[item.nodeid] = TestInfo(title=item.name, parent=parent, key=item.nodeid)

    def pytest_runtest_logreport(self, report: pytest.TestReport) -> None:
        test = self._tests.get(report.nodeid)
        if test is None:
            return

        if report.when == "setup":
            if report.skipped:
                self.reporter.emit(EventKind.TEST_PENDING, test)
                return
            self.reporter.emit(EventKind.TEST_START, test)
            if report.failed:
                test.state = TEST_FAILED
                self.reporter.emit(EventKind.TEST_FAIL, test, error=report.longreprtext)
        elif report.when == "call":
            if report.failed:
                test.state = TEST_FAILED
                self.reporter.emit(EventKind.TEST_FAIL, test, error=report.longreprtext)
            elif report.skipped:
                test.state = "skipped"
            else:
                test.state = TEST_PASSED
                self.reporter.emit(EventKind.TEST_PASS, test)
        elif report.failed and test.state not in (None, TEST_FAILED):
            # teardown errors fail a started test that had not failed yet
            test.state = TEST_FAILED
            self.reporter.emit(EventKind.TEST_FAIL, test, error=report.longreprtext)

    def pytest_runtest_logfinish(self, nodeid: str, location: tuple) -> None:
        test = self._tests.pop(nodeid, None)
        if test is not None:
            self.reporter.emit(EventKind.TEST_END, test)

    @pytest.hookimpl(trylast=True)
    def pytest_sessionfinish(self, session: pytest.Session, exitstatus: int) -> None:
        self._close_suites()
        self.reporter.emit(EventKind.SUITE_END, self._root)
        self.reporter.emit(EventKind.RUN_END)
        self.reporter.close()


# 🔼⚙️
