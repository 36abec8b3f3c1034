# src/rprelay/phase.py

"""
Resolves which part of the launch lifecycle this process owns and manages
the launch identifier shared between split-phase processes.
"""

import os
from enum import Enum
from pathlib import Path

import structlog

from rprelay.exceptions import LaunchIdError
from rprelay.telemetry import StructLogger

log: StructLogger = structlog.get_logger("rprelay.phase")

DEFAULT_LAUNCH_ID_FILE = "rp_launch_id"


class Phase(str, Enum):
    """Lifecycle segment owned by the current process."""

    START = "start"
    TEST = "test"
    END = "end"
    COMPLETE_TEST = "complete_test"

    @classmethod
    def parse(cls, value: "str | Phase | None") -> "Phase":
        """Normalizes a requested phase; unknown or missing values mean COMPLETE_TEST."""
        if isinstance(value, Phase):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                log.debug("Unrecognized phase, using default", requested=value)
        return cls.COMPLETE_TEST


class PhaseResolver:
    """
    Owns the persisted launch identifier for one process.

    ``start`` writes it once after the launch is created, ``test`` and ``end``
    read it once, ``complete_test`` never touches the file.
    """

    def __init__(
        self,
        phase: "Phase | str | None",
        launch_id_file: "str | os.PathLike | None" = DEFAULT_LAUNCH_ID_FILE,
        cwd: Path | None = None,
    ):
        self.phase = Phase.parse(phase)
        self.launch_id_file = launch_id_file
        self.cwd = cwd
        self._persisted = False
        self._log = log.bind(phase=self.phase.value)

    @property
    def creates_launch(self) -> bool:
        return self.phase in (Phase.START, Phase.COMPLETE_TEST)

    @property
    def finishes_launch(self) -> bool:
        return self.phase in (Phase.END, Phase.COMPLETE_TEST)

    @property
    def requires_launch_id(self) -> bool:
        return self.phase in (Phase.TEST, Phase.END)

    @property
    def persists_launch_id(self) -> bool:
        return self.phase is Phase.START

    def resolve_path(self) -> Path:
        """Returns the launch id file path, relative paths anchored at the working directory."""
        raw = self.launch_id_file
        if isinstance(raw, os.PathLike):
            raw = os.fspath(raw)
        if not isinstance(raw, str) or not raw.strip():
            raise LaunchIdError("Launch id file must be a non-empty path", path=raw)
        path = Path(raw).expanduser()
        if not path.is_absolute():
            path = (self.cwd or Path.cwd()) / path
        return path

    def resolve_launch_id(self) -> str | None:
        """
        Returns the launch identifier this process must reuse.

        Only ``test`` and ``end`` read the persisted file; other phases get
        None because their launch does not exist yet.

        Raises:
            LaunchIdError: If the file path is unusable, the file cannot be
                read, or it holds no identifier.
        """
        if not self.requires_launch_id:
            return None

        path = self.resolve_path()
        try:
            launch_id = path.read_text(encoding="utf-8").strip()
        except OSError as e:
            self._log.error("Failed to read launch id", path=str(path), error=str(e))
            raise LaunchIdError("Cannot read persisted launch id", path=path, details=e) from e

        if not launch_id:
            raise LaunchIdError("Persisted launch id file is empty", path=path)

        self._log.info("Loaded persisted launch id", path=str(path), launch_id=launch_id)
        return launch_id

    def persist_launch_id(self, launch_id: str) -> Path | None:
        """Writes the new launch id for later phases. A no-op outside ``start``."""
        if not self.persists_launch_id:
            return None
        if self._persisted:
            self._log.warning("Launch id already persisted, ignoring second write", launch_id=launch_id)
            return None

        path = self.resolve_path()
        try:
            path.write_text(launch_id, encoding="utf-8")
        except OSError as e:
            self._log.error("Failed to persist launch id", path=str(path), error=str(e))
            raise LaunchIdError("Cannot write launch id", path=path, details=e) from e

        self._persisted = True
        self._log.info("Persisted launch id", path=str(path), launch_id=launch_id)
        return path


# 🔼⚙️
