# src/rprelay/telemetry/__init__.py

"""
Logging setup for rprelay.
"""

from .logger import StructLogger, setup_logging

__all__ = ["StructLogger", "setup_logging"]

# 🔼⚙️
