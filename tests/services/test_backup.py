import gzip
from datetime import datetime

import pytest

from ipeoplepm.errors import BackendUnavailable, BackupFailed
from ipeoplepm.services.backup import BackupService


class DummyLogger:
    def info(self, *_args, **_kwargs):
        return None

    def debug(self, *_args, **_kwargs):
        return None

    def warning(self, *_args, **_kwargs):
        return None


class DummyConsole:
    def print(self, *_args, **_kwargs):
        return None


class FakeBackend:
    def __init__(self, running=("db", "app"), dump=b"-- PostgreSQL database dump\n", error=None):
        self.running = list(running)
        self.dump = dump
        self.error = error
        self.exec_calls = []

    def running_services(self):
        return self.running

    def exec_to(self, service, command, sink):
        self.exec_calls.append((service, tuple(command)))
        if self.error:
            sink.write(b"partial")
            raise self.error
        sink.write(self.dump)
        return len(self.dump)


def _service(tmp_path, backend, moment=datetime(2026, 10, 18, 9, 30, 5)):
    return BackupService(
        backup_dir=str(tmp_path / "backups"),
        backend=backend,
        logger=DummyLogger(),
        console=DummyConsole(),
        now=lambda: moment,
    )


def test_backup_writes_compressed_timestamped_dump(tmp_path):
    backend = FakeBackend()
    service = _service(tmp_path, backend)

    path = service.create_backup()

    assert path.endswith("backup_20261018_093005.sql.gz")
    with gzip.open(path, "rb") as file_obj:
        assert file_obj.read() == b"-- PostgreSQL database dump\n"
    assert backend.exec_calls == [("db", ("pg_dump", "-U", "postgres", "ipeople_pm"))]


def test_two_backups_in_the_same_second_do_not_collide(tmp_path):
    service = _service(tmp_path, FakeBackend())

    first = service.create_backup()
    second = service.create_backup()

    assert first != second
    assert second.endswith("backup_20261018_093005_1.sql.gz")
    assert len(list((tmp_path / "backups").iterdir())) == 2


def test_backup_requires_running_database(tmp_path):
    backend = FakeBackend(running=["app"])
    service = _service(tmp_path, backend)

    with pytest.raises(BackupFailed, match="`db` service is not running"):
        service.create_backup()

    assert backend.exec_calls == []


def test_failed_dump_leaves_no_partial_file(tmp_path):
    backend = FakeBackend(error=BackendUnavailable("Command failed (1): pg_dump"))
    service = _service(tmp_path, backend)

    with pytest.raises(BackupFailed, match="pg_dump"):
        service.create_backup()

    assert list((tmp_path / "backups").iterdir()) == []


def test_empty_dump_is_rejected(tmp_path):
    service = _service(tmp_path, FakeBackend(dump=b""))

    with pytest.raises(BackupFailed, match="empty"):
        service.create_backup()

    assert list((tmp_path / "backups").iterdir()) == []
