#
# tests/unit/test_pytest_plugin.py
#
"""
Runs small pytest sessions through the rprelay plugin and checks the
resulting connector calls.
"""

import logging
from pathlib import Path

import pytest
import structlog

from rprelay.pytest_plugin import RelayPlugin
from rprelay.runtime import Reporter
from rprelay.telemetry.logger import BASE_LOGGER_NAME

SAMPLE_TESTS = """
import pytest

def test_ok():
    pass

def test_bad():
    assert 1 == 2

@pytest.mark.skip(reason="later")
def test_later():
    pass

class TestGroup:
    def test_inner(self):
        pass
"""


@pytest.fixture
def relay_plugin(relay_config, connector) -> RelayPlugin:
    return RelayPlugin(Reporter(relay_config, connector=connector))


def test_session_is_reported_as_nested_items(pytester: pytest.Pytester, relay_plugin, connector) -> None:
    pytester.makepyfile(test_sample=SAMPLE_TESTS)

    result = pytester.runpytest_inprocess(plugins=[relay_plugin])

    result.assert_outcomes(passed=2, failed=1, skipped=1)
    calls = connector.calls
    failure_log = calls[5]
    assert failure_log[:3] == ("send_log", "test_bad", "failed")
    assert "assert 1 == 2" in failure_log[3]
    assert calls[:5] + calls[6:] == [
        ("start_launch",),
        ("start_root_item", "test_sample.py", "SUITE"),
        ("start_child_item", "test_ok", "TEST", "test_sample.py"),
        ("finish_item", "passed", "test_ok"),
        ("start_child_item", "test_bad", "TEST", "test_sample.py"),
        ("finish_item", "failed", "test_bad"),
        ("start_child_item", "test_later", "TEST", "test_sample.py"),
        ("send_log", "test_later", "skipped", "test_later"),
        ("finish_item", "skipped", "test_later"),
        ("start_child_item", "TestGroup", "SUITE", "test_sample.py"),
        ("start_child_item", "test_inner", "TEST", "TestGroup"),
        ("finish_item", "passed", "test_inner"),
        ("finish_item", "passed", "TestGroup"),
        ("finish_item", "failed", "test_sample.py"),
        ("finish_launch", "launch-1"),
    ]
    assert connector.closed


def test_each_module_is_its_own_root_suite(pytester: pytest.Pytester, relay_plugin, connector) -> None:
    pytester.makepyfile(test_one="def test_a():\n    pass\n", test_two="def test_b():\n    pass\n")

    pytester.runpytest_inprocess(plugins=[relay_plugin])

    roots = [call[1] for call in connector.calls if call[0] == "start_root_item"]
    assert roots == ["test_one.py", "test_two.py"]
    assert ("finish_item", "passed", "test_one.py") in connector.calls


def test_setup_error_fails_the_test(pytester: pytest.Pytester, relay_plugin, connector) -> None:
    pytester.makepyfile(
        test_setup="""
import pytest

@pytest.fixture
def broken():
    raise RuntimeError("no database")

def test_needs_db(broken):
    pass
"""
    )

    result = pytester.runpytest_inprocess(plugins=[relay_plugin])

    result.assert_outcomes(errors=1)
    assert ("start_child_item", "test_needs_db", "TEST", "test_setup.py") in connector.calls
    logs = [call for call in connector.calls if call[0] == "send_log"]
    assert len(logs) == 1
    assert "no database" in logs[0][3]
    assert ("finish_item", "failed", "test_needs_db") in connector.calls
    assert ("finish_item", "failed", "test_setup.py") in connector.calls


def test_skip_inside_test_finishes_skipped(pytester: pytest.Pytester, relay_plugin, connector) -> None:
    pytester.makepyfile(test_skip="import pytest\n\ndef test_runtime_skip():\n    pytest.skip('not here')\n")

    pytester.runpytest_inprocess(plugins=[relay_plugin])

    assert ("start_child_item", "test_runtime_skip", "TEST", "test_skip.py") in connector.calls
    assert ("finish_item", "skipped", "test_runtime_skip") in connector.calls
    assert ("finish_item", "passed", "test_skip.py") in connector.calls


def test_test_phase_reports_into_persisted_launch(
    pytester: pytest.Pytester, config_data, connector, tmp_path: Path
) -> None:
    (tmp_path / "rp_launch_id").write_text("abc123", encoding="utf-8")
    reporter = Reporter.from_source(config_data, phase="test", connector=connector, cwd=tmp_path)
    pytester.makepyfile(test_mid="def test_a():\n    pass\n")

    pytester.runpytest_inprocess(plugins=[RelayPlugin(reporter)])

    operations = connector.operations()
    assert "start_launch" not in operations
    assert "finish_launch" not in operations
    assert operations == ["start_root_item", "start_child_item", "finish_item", "finish_item"]


def test_bad_config_is_a_usage_error(pytester: pytest.Pytester, isolated_logging) -> None:
    pytester.makepyfile(test_x="def test_a():\n    pass\n")
    result = pytester.runpytest_inprocess("--rp-config", "missing.toml")
    assert result.ret == pytest.ExitCode.USAGE_ERROR


def test_disable_flag_skips_reporting(pytester: pytest.Pytester) -> None:
    pytester.makepyfile(test_x="def test_a():\n    pass\n")
    result = pytester.runpytest_inprocess("--rp-config", "missing.toml", "--rp-disable")
    result.assert_outcomes(passed=1)


QUIET_CONFIG = """
[reporter]
endpoint = "http://127.0.0.1:9"
project = "demo"
api_key = "secret"
timeout = 1

[global]
log_level = "ERROR"
"""


@pytest.fixture
def isolated_logging():
    """Undoes process-wide logging changes made by in-process runs."""
    structlog.reset_defaults()
    yield
    structlog.reset_defaults()
    base = logging.getLogger(BASE_LOGGER_NAME)
    for handler in list(base.handlers):
        base.removeHandler(handler)
    base.setLevel(logging.NOTSET)
    base.propagate = True


def test_configured_log_level_keeps_stdout_clean(pytester: pytest.Pytester) -> None:
    pytester.makefile(".toml", rprelay=QUIET_CONFIG)
    pytester.makepyfile(test_quiet="def test_a():\n    pass\n")

    result = pytester.runpytest_subprocess("--rp-config", "rprelay.toml")

    result.assert_outcomes(passed=1)
    stdout = result.stdout.str()
    assert "Configuration loaded" not in stdout
    assert "Reporter initialized" not in stdout
    assert "Sending request" not in stdout


def test_host_structlog_configuration_is_kept(pytester: pytest.Pytester, isolated_logging) -> None:
    structlog.configure(processors=[structlog.processors.KeyValueRenderer()])
    host_processors = structlog.get_config()["processors"]
    pytester.makefile(".toml", rprelay=QUIET_CONFIG)
    pytester.makepyfile(test_host="def test_a():\n    pass\n")

    result = pytester.runpytest_inprocess("--rp-config", "rprelay.toml")

    result.assert_outcomes(passed=1)
    assert structlog.get_config()["processors"] == host_processors
