#
# src/rprelay/connector/__init__.py
#
"""
Reporting backend connectors.
"""

from .http import HttpReportingConnector

__all__ = ["HttpReportingConnector"]

# 🔼⚙️
