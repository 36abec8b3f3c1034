#
# src/rprelay/__init__.py
#
"""
rprelay: reports test framework lifecycle events to ReportPortal.
"""

from rprelay.config import RelayConfig, load_config
from rprelay.exceptions import ConfigurationError, ConnectorError, LaunchIdError, RprelayError
from rprelay.phase import Phase, PhaseResolver
from rprelay.runtime import EventKind, LifecycleEvent, Reporter, SuiteInfo, TestInfo

__all__ = [
    "ConfigurationError",
    "ConnectorError",
    "EventKind",
    "LaunchIdError",
    "LifecycleEvent",
    "Phase",
    "PhaseResolver",
    "RelayConfig",
    "Reporter",
    "RprelayError",
    "SuiteInfo",
    "TestInfo",
    "load_config",
]

# 🔼⚙️
