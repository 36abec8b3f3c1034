#
# src/rprelay/runtime/__init__.py
#
"""
Event translation runtime: event models, hierarchy tracking, and the reporter.
"""

from .events import EventKind, LifecycleEvent, SuiteInfo, TestInfo
from .hierarchy import HierarchyTracker
from .reporter import Reporter
from .translator import EventTranslator

__all__ = [
    "EventKind",
    "EventTranslator",
    "HierarchyTracker",
    "LifecycleEvent",
    "Reporter",
    "SuiteInfo",
    "TestInfo",
]

# 🔼⚙️
