from click.testing import CliRunner

import ipeoplepm.cli as cli_module


class FakeDispatcher:
    captured = {}

    def __init__(self, settings):
        FakeDispatcher.captured["settings"] = settings

    def dispatch(self, command, args):
        FakeDispatcher.captured["command"] = command
        FakeDispatcher.captured["args"] = list(args)
        return 0


def test_cli_passes_subcommand_and_arguments(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("SUDO_USER", raising=False)
    monkeypatch.delenv("IPEOPLE_PM_CONFIG", raising=False)
    monkeypatch.setattr(cli_module, "OperationsDispatcher", FakeDispatcher)

    result = CliRunner().invoke(cli_module.main, ["logs", "db"])

    assert result.exit_code == 0
    assert FakeDispatcher.captured["command"] == "logs"
    assert FakeDispatcher.captured["args"] == ["db"]
    settings = FakeDispatcher.captured["settings"]
    assert settings.install_dir == str(tmp_path / ".local/share/ipeople-password-manager")
    assert settings.backup_dir == str(tmp_path / "ipeople-pm-backups")


def test_cli_applies_config_file(tmp_path, monkeypatch):
    config_file = tmp_path / "config.yml"
    config_file.write_text(
        "install_dir: ~/pm\nsettle_delay_seconds: 7\ndocker_group: containers\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("SUDO_USER", raising=False)
    monkeypatch.setenv("IPEOPLE_PM_CONFIG", str(config_file))
    monkeypatch.setattr(cli_module, "OperationsDispatcher", FakeDispatcher)

    result = CliRunner().invoke(cli_module.main, ["status"])

    assert result.exit_code == 0
    settings = FakeDispatcher.captured["settings"]
    assert settings.install_dir == f"{tmp_path}/pm"
    assert settings.settle_delay_seconds == 7.0
    assert settings.docker_group == "containers"


def test_cli_rejects_invalid_config(tmp_path, monkeypatch):
    config_file = tmp_path / "config.yml"
    config_file.write_text("colour: blue\n", encoding="utf-8")
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("IPEOPLE_PM_CONFIG", str(config_file))

    result = CliRunner().invoke(cli_module.main, ["status"])

    assert result.exit_code != 0
    assert "Unknown configuration keys" in result.output


def test_cli_exit_code_follows_dispatcher(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("SUDO_USER", raising=False)
    monkeypatch.delenv("IPEOPLE_PM_CONFIG", raising=False)

    result = CliRunner().invoke(cli_module.main, ["status"])

    assert result.exit_code == 1


def test_cli_reports_non_numeric_setting_cleanly(tmp_path, monkeypatch):
    config_file = tmp_path / "config.yml"
    config_file.write_text("settle_delay_seconds: soon\n", encoding="utf-8")
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("IPEOPLE_PM_CONFIG", str(config_file))

    result = CliRunner().invoke(cli_module.main, ["status"])

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "must be a number" in result.output


def test_cli_help_falls_through_to_usage(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("SUDO_USER", raising=False)
    monkeypatch.delenv("IPEOPLE_PM_CONFIG", raising=False)

    result = CliRunner().invoke(cli_module.main, ["--help"])

    assert result.exit_code == 0
    assert "Usage: ipeople-pm {command}" in result.output
    assert "clean-update" in result.output
