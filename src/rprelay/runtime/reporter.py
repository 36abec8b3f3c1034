# src/rprelay/runtime/reporter.py

"""
Assembles config, connector, phase resolver, tracker and translator into the
object test framework adapters feed events to.
"""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import attrs
import structlog

from rprelay.config import RelayConfig, load_config
from rprelay.connector import HttpReportingConnector
from rprelay.phase import Phase, PhaseResolver
from rprelay.protocols import ReportingConnector
from rprelay.runtime.events import EventKind, LifecycleEvent, SuiteInfo, TestInfo
from rprelay.runtime.hierarchy import HierarchyTracker
from rprelay.runtime.translator import EventTranslator
from rprelay.telemetry import StructLogger

log: StructLogger = structlog.get_logger("rprelay.runtime.reporter")


class Reporter:
    """
    Entry point for lifecycle events of one process.

    Construction performs all configuration checks, including reading the
    persisted launch id for ``test``/``end`` phases, so configuration errors
    surface before the first event. After that, ``handle`` never raises.
    """

    def __init__(
        self,
        config: RelayConfig,
        connector: ReportingConnector | None = None,
        cwd: Path | None = None,
    ):
        self.config = config
        self.phase_resolver = PhaseResolver(config.phase.phase, config.phase.launch_id_file, cwd=cwd)
        if self.phase_resolver.persists_launch_id:
            self.phase_resolver.resolve_path()
        launch_id = self.phase_resolver.resolve_launch_id()

        self.connector = connector or HttpReportingConnector(config.reporter)
        self.tracker = HierarchyTracker()
        self.translator = EventTranslator(self.connector, self.tracker, self.phase_resolver, launch_id=launch_id)
        log.info(
            "Reporter initialized",
            phase=self.phase.value,
            project=config.reporter.project,
            launch_id=launch_id,
        )

    @staticmethod
    def resolve_config(
        source: "Mapping[str, Any] | str | os.PathLike",
        phase: "Phase | str | None" = None,
        launch_id_file: str | None = None,
        cwd: Path | None = None,
    ) -> RelayConfig:
        """Loads configuration from ``source`` and applies explicit phase overrides."""
        config = load_config(source, cwd=cwd)
        overrides: dict[str, Any] = {}
        if phase is not None:
            overrides["phase"] = Phase.parse(phase)
        if launch_id_file is not None:
            overrides["launch_id_file"] = launch_id_file
        if overrides:
            config = attrs.evolve(config, phase=attrs.evolve(config.phase, **overrides))
        return config

    @classmethod
    def from_source(
        cls,
        source: "Mapping[str, Any] | str | os.PathLike",
        phase: "Phase | str | None" = None,
        launch_id_file: str | None = None,
        connector: ReportingConnector | None = None,
        cwd: Path | None = None,
    ) -> "Reporter":
        config = cls.resolve_config(source, phase=phase, launch_id_file=launch_id_file, cwd=cwd)
        return cls(config, connector=connector, cwd=cwd)

    @property
    def phase(self) -> Phase:
        return self.phase_resolver.phase

    @property
    def launch_id(self) -> str | None:
        return self.translator.launch_id

    def handle(self, event: LifecycleEvent) -> None:
        """Feeds one event to the translator; reporting problems never reach the caller."""
        try:
            self.translator.dispatch(event)
        except Exception as e:
            log.error("Failed to handle lifecycle event", kind=event.kind, error=str(e), exc_info=True)

    def emit(self, kind: EventKind | str, node: SuiteInfo | TestInfo | None = None, error: str | None = None) -> None:
        self.handle(LifecycleEvent(kind=kind, node=node, error=error))

    def close(self) -> None:
        try:
            self.connector.close()
        except Exception as e:
            log.warning("Failed to close connector", error=str(e))


# 🔼⚙️
