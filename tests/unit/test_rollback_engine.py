"""Tests for the rollback engine."""

from pathlib import Path

import pytest

from doh_edge.core.models import ManagedPath
from doh_edge.exceptions import BackupError
from doh_edge.rollback.engine import RollbackEngine
from doh_edge.system.runner import CommandRunner
from doh_edge.system.services import ServiceOrchestrator


@pytest.fixture
def engine(store, runner) -> RollbackEngine:
    return RollbackEngine(store, ServiceOrchestrator.for_edge(runner))


@pytest.fixture
def managed(tmp_path: Path) -> list[ManagedPath]:
    etc = tmp_path / "etc"
    etc.mkdir()
    return [
        ManagedPath(etc / "doh.conf", "resolver"),
        ManagedPath(etc / "dnsdist.conf", "gateway"),
    ]


class TestRollbackEngine:
    def test_restores_newest_backup(self, engine, writer, managed, clock):
        resolver = managed[0].path
        resolver.write_text("original\n")
        writer.write(managed[0], "first install\n")
        clock.advance(30)
        writer.write(managed[0], "second install\n")

        report = engine.rollback(managed[:1])

        assert report.restored == [resolver]
        assert resolver.read_text() == "first install\n"

    def test_removes_files_without_backup(self, engine, writer, managed):
        writer.write(managed[1], "fresh\n")

        report = engine.rollback(managed[1:])

        assert report.removed == [managed[1].path]
        assert not managed[1].path.exists()

    def test_missing_file_without_backup_is_absent(self, engine, managed):
        report = engine.rollback(managed)
        assert report.absent == [m.path for m in managed]
        assert report.total_paths == 2

    def test_stops_gateway_before_resolver(self, engine, runner, managed):
        engine.rollback(managed)
        assert runner.index("systemctl", "stop", "dnsdist") < runner.index(
            "systemctl", "stop", "unbound"
        )

    def test_stop_failure_does_not_block_restore(self, engine, runner, writer, managed):
        runner.script("systemctl", "stop", "dnsdist", returncode=1)
        managed[0].path.write_text("original\n")
        writer.write(managed[0], "installed\n")

        report = engine.rollback(managed)

        assert report.stop_failures == ["dnsdist"]
        assert managed[0].path.read_text() == "original\n"

    def test_duplicates_are_processed_once(self, engine, writer, managed):
        writer.write(managed[1], "fresh\n")
        report = engine.rollback([managed[1], managed[1]])
        assert report.removed == [managed[1].path]
        assert report.absent == []

    def test_second_rollback_is_safe(self, engine, writer, managed):
        managed[0].path.write_text("original\n")
        writer.write(managed[0], "installed\n")
        writer.write(managed[1], "fresh\n")

        engine.rollback(managed)
        report = engine.rollback(managed)

        assert report.restored == [managed[0].path]
        assert report.absent == [managed[1].path]
        assert managed[0].path.read_text() == "original\n"

    def test_missing_supervisor_does_not_block_restore(
        self, store, writer, managed, tmp_path
    ):
        empty_path = tmp_path / "empty-bin"
        empty_path.mkdir()
        services = ServiceOrchestrator.for_edge(CommandRunner(env={"PATH": str(empty_path)}))
        writer.write(managed[1], "fresh\n")

        report = RollbackEngine(store, services).rollback(managed[1:])

        assert report.stop_failures == ["dnsdist", "unbound"]
        assert report.removed == [managed[1].path]
        assert not managed[1].path.exists()

    def test_packages_are_left_alone(self, engine, runner, managed):
        engine.rollback(managed)
        assert not runner.ran("apt-get")

    def test_unremovable_file_raises(self, engine, managed, tmp_path):
        directory = tmp_path / "etc" / "a-directory"
        directory.mkdir()
        with pytest.raises(BackupError):
            engine.rollback([ManagedPath(directory, "gateway")])
