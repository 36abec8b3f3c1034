#
# tests/unit/test_phase.py
#
"""
Tests for phase parsing and the persisted launch id.
"""

from pathlib import Path

import pytest

from rprelay.exceptions import ConfigurationError, LaunchIdError
from rprelay.phase import Phase, PhaseResolver


class TestPhaseParse:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("start", Phase.START),
            ("test", Phase.TEST),
            ("end", Phase.END),
            ("complete_test", Phase.COMPLETE_TEST),
            (" END ", Phase.END),
            ("finish", Phase.COMPLETE_TEST),
            ("", Phase.COMPLETE_TEST),
            (None, Phase.COMPLETE_TEST),
        ],
    )
    def test_parse(self, raw, expected) -> None:
        assert Phase.parse(raw) is expected

    def test_parse_passes_phase_through(self) -> None:
        assert Phase.parse(Phase.TEST) is Phase.TEST


class TestPhaseResponsibilities:
    def test_start(self) -> None:
        resolver = PhaseResolver("start")
        assert resolver.creates_launch
        assert not resolver.finishes_launch
        assert resolver.persists_launch_id
        assert not resolver.requires_launch_id

    def test_test(self) -> None:
        resolver = PhaseResolver("test")
        assert not resolver.creates_launch
        assert not resolver.finishes_launch
        assert resolver.requires_launch_id

    def test_end(self) -> None:
        resolver = PhaseResolver("end")
        assert not resolver.creates_launch
        assert resolver.finishes_launch
        assert resolver.requires_launch_id

    def test_complete_test(self) -> None:
        resolver = PhaseResolver("bogus")
        assert resolver.phase is Phase.COMPLETE_TEST
        assert resolver.creates_launch
        assert resolver.finishes_launch
        assert not resolver.persists_launch_id
        assert not resolver.requires_launch_id


class TestLaunchIdFile:
    def test_round_trip_between_processes(self, tmp_path: Path) -> None:
        """A start process writes the id, a separate test process reads the same string."""
        writer = PhaseResolver("start", "launch.txt", cwd=tmp_path)
        writer.persist_launch_id("abc123")

        assert (tmp_path / "launch.txt").read_text(encoding="utf-8") == "abc123"

        reader = PhaseResolver("test", "launch.txt", cwd=tmp_path)
        assert reader.resolve_launch_id() == "abc123"

    def test_reader_strips_surrounding_whitespace(self, tmp_path: Path) -> None:
        (tmp_path / "id").write_text("abc123\n", encoding="utf-8")
        assert PhaseResolver("end", "id", cwd=tmp_path).resolve_launch_id() == "abc123"

    def test_absolute_path_ignores_cwd(self, tmp_path: Path) -> None:
        target = tmp_path / "abs_id"
        PhaseResolver("start", str(target), cwd=tmp_path / "elsewhere").persist_launch_id("xyz")
        assert target.read_text(encoding="utf-8") == "xyz"

    def test_relative_path_uses_process_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        PhaseResolver("start", "rp_launch_id").persist_launch_id("from-cwd")
        assert (tmp_path / "rp_launch_id").read_text(encoding="utf-8") == "from-cwd"

    def test_missing_file_is_configuration_error(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            PhaseResolver("test", "missing", cwd=tmp_path).resolve_launch_id()
        assert isinstance(exc_info.value, LaunchIdError)
        assert exc_info.value.path == tmp_path / "missing"

    def test_empty_file_is_configuration_error(self, tmp_path: Path) -> None:
        (tmp_path / "id").write_text("   \n", encoding="utf-8")
        with pytest.raises(LaunchIdError):
            PhaseResolver("end", "id", cwd=tmp_path).resolve_launch_id()

    @pytest.mark.parametrize("bad_path", [None, "", 42])
    def test_unusable_path_is_configuration_error(self, bad_path) -> None:
        with pytest.raises(LaunchIdError):
            PhaseResolver("test", bad_path).resolve_launch_id()

    @pytest.mark.parametrize("phase", ["start", "complete_test"])
    def test_creating_phases_never_read(self, phase: str, tmp_path: Path) -> None:
        assert PhaseResolver(phase, "missing", cwd=tmp_path).resolve_launch_id() is None

    @pytest.mark.parametrize("phase", ["test", "end", "complete_test"])
    def test_only_start_writes(self, phase: str, tmp_path: Path) -> None:
        assert PhaseResolver(phase, "id", cwd=tmp_path).persist_launch_id("abc") is None
        assert not (tmp_path / "id").exists()

    def test_start_writes_only_once(self, tmp_path: Path) -> None:
        resolver = PhaseResolver("start", "id", cwd=tmp_path)
        resolver.persist_launch_id("first")
        resolver.persist_launch_id("second")
        assert (tmp_path / "id").read_text(encoding="utf-8") == "first"

    def test_write_failure_is_launch_id_error(self, tmp_path: Path) -> None:
        resolver = PhaseResolver("start", "no_such_dir/id", cwd=tmp_path)
        with pytest.raises(LaunchIdError):
            resolver.persist_launch_id("abc")
