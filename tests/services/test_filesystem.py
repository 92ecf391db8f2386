import os

import pytest

from ipeoplepm.errors import ManagerError
from ipeoplepm.services.filesystem import FileSystemService


class DummyLogger:
    def debug(self, *_args, **_kwargs):
        return None

    def info(self, *_args, **_kwargs):
        return None

    def warning(self, *_args, **_kwargs):
        return None


class DummyConsole:
    def print(self, *_args, **_kwargs):
        return None


def _service():
    return FileSystemService(logger=DummyLogger(), console=DummyConsole())


def test_remove_file_deletes_writable_file(tmp_path):
    binary = tmp_path / "ipeople-pm"
    binary.write_text("#!/bin/sh\n", encoding="utf-8")
    calls = []

    _service().remove_file(str(binary), calls.append)

    assert not binary.exists()
    assert calls == []


def test_remove_file_escalates_on_permission_error(tmp_path, monkeypatch):
    binary = tmp_path / "ipeople-pm"
    binary.write_text("#!/bin/sh\n", encoding="utf-8")
    calls = []

    def denied(_path):
        raise PermissionError("denied")

    monkeypatch.setattr("ipeoplepm.services.filesystem.os.remove", denied)

    _service().remove_file(str(binary), calls.append)

    assert calls == [str(binary)]


def test_remove_file_ignores_missing_path(tmp_path):
    calls = []

    _service().remove_file(str(tmp_path / "absent"), calls.append)

    assert calls == []


def test_remove_dir_removes_tree(tmp_path):
    target = tmp_path / "install"
    (target / "nested").mkdir(parents=True)
    (target / "nested" / ".env").write_text("A=1\n", encoding="utf-8")
    calls = []

    _service().remove_dir(str(target), calls.append)

    assert not target.exists()
    assert calls == []


def test_remove_dir_escalates_on_permission_error(tmp_path, monkeypatch):
    target = tmp_path / "install"
    target.mkdir()

    def denied(_path):
        raise PermissionError("denied")

    def privileged_remove(path):
        os.rmdir(path)

    monkeypatch.setattr("ipeoplepm.services.filesystem.shutil.rmtree", denied)

    _service().remove_dir(str(target), privileged_remove)

    assert not target.exists()


def test_remove_dir_raises_when_directory_survives(tmp_path, monkeypatch):
    target = tmp_path / "install"
    target.mkdir()

    def denied(_path):
        raise PermissionError("denied")

    monkeypatch.setattr("ipeoplepm.services.filesystem.shutil.rmtree", denied)

    with pytest.raises(ManagerError, match="still exists"):
        _service().remove_dir(str(target), lambda _path: None)

    assert target.exists()


def test_remove_dir_raises_on_other_errors(tmp_path, monkeypatch):
    target = tmp_path / "install"
    target.mkdir()

    def busy(_path):
        raise OSError("device busy")

    monkeypatch.setattr("ipeoplepm.services.filesystem.shutil.rmtree", busy)

    with pytest.raises(ManagerError, match="device busy"):
        _service().remove_dir(str(target), lambda _path: None)
