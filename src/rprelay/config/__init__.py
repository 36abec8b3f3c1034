#
# config/__init__.py
#
"""
Configuration handling sub-package for rprelay.

Exports the loading function and core configuration models.
"""

from .loader import load_config
from .models import GlobalConfig, PhaseConfig, RelayConfig, ReporterConfig

__all__ = [
    "GlobalConfig",
    "PhaseConfig",
    "RelayConfig",
    "ReporterConfig",
    "load_config",
]

# 🔼⚙️
