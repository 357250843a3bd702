"""Tests for hfsupload CLI commands."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import yaml
from click.testing import CliRunner

from hfsupload.cli.main import cli
from hfsupload.core.config import Config, Profile
from hfsupload.core.exceptions import ResourceExistsError
from hfsupload.models.upload import DestinationProps


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("HFS_URL", "HFS_PROFILE", "HFS_VERIFY_SSL", "HFS_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def mock_config():
    cfg = Config(profiles={"default": Profile(url="https://files.example.org", resume="never")})
    with patch("hfsupload.cli.common.Config.load", return_value=cfg):
        yield cfg


class InstantTransport:
    """Completes every request synchronously with a fixed status."""

    def __init__(self, status: int = 200) -> None:
        self.status = status
        self.requests = []

    def send(self, request, on_progress, on_complete):
        self.requests.append(request)
        on_progress(request.body_size)
        on_complete(self.status, None)
        return MagicMock()

    def close(self) -> None:
        pass


@pytest.fixture
def folders():
    with patch("hfsupload.cli.upload.FolderService") as mock_cls:
        service = mock_cls.return_value
        service.get_props.return_value = DestinationProps(can_upload=True, can_comment=True)
        yield service


def _patch_transport(transport: InstantTransport):
    return patch("hfsupload.cli.upload.HttpxTransport", return_value=transport)


def _patch_events():
    return patch("hfsupload.cli.upload.HttpxEventSource")


# =============================================================================
# Main Group
# =============================================================================


class TestMain:
    """Tests for the command group."""

    def test_version(self, runner: CliRunner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "hfs-upload" in result.output

    def test_help_lists_commands(self, runner: CliRunner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for name in ("upload", "mkdir", "ping", "config"):
            assert name in result.output


# =============================================================================
# Upload
# =============================================================================


class TestUpload:
    """Tests for the upload command."""

    def test_uploads_files_and_folders(self, runner, mock_config, folders, make_file, temp_dir: Path):
        loose = make_file("notes.txt", b"hello")
        make_file("album/a.png", b"1234")
        transport = InstantTransport()

        with _patch_transport(transport), _patch_events():
            result = runner.invoke(
                cli,
                ["upload", "docs", str(loose), str(temp_dir / "album"), "--comment", "batch", "-o", "json"],
            )

        assert result.exit_code == 0, result.output
        assert [r.filename for r in transport.requests] == ["notes.txt", "album/a.png"]
        assert {r.destination for r in transport.requests} == {"/docs/"}
        assert all(r.params["comment"] == "batch" for r in transport.requests)
        assert '"uploaded": 2' in result.output
        folders.get_props.assert_called_once_with("/docs/")

    def test_skip_existing_flag_overrides_profile(self, runner, mock_config, folders, make_file):
        path = make_file("a.txt")
        transport = InstantTransport(status=409)

        with _patch_transport(transport), _patch_events():
            result = runner.invoke(cli, ["upload", "/docs/", str(path), "--skip-existing"])

        assert result.exit_code == 0, result.output
        assert transport.requests[0].params["skipExisting"] == "1"

    def test_failure_exits_nonzero(self, runner, mock_config, folders, make_file):
        path = make_file("a.txt")

        with _patch_transport(InstantTransport(status=500)), _patch_events():
            result = runner.invoke(cli, ["upload", "/docs/", str(path)])

        assert result.exit_code == 1

    def test_no_upload_permission(self, runner, mock_config, folders, make_file):
        folders.get_props.return_value = DestinationProps(can_upload=False)
        path = make_file("a.txt")

        result = runner.invoke(cli, ["upload", "/docs/", str(path)])

        assert result.exit_code == 4

    def test_destination_accept_policy_applies(self, runner, mock_config, folders, make_file):
        folders.get_props.return_value = DestinationProps(can_upload=True, accept=".png")
        path = make_file("a.txt")
        transport = InstantTransport()

        with _patch_transport(transport), _patch_events():
            result = runner.invoke(cli, ["upload", "/docs/", str(path)])

        assert result.exit_code == 0
        assert transport.requests == []

    def test_destination_accept_star_uploads_anything(self, runner, mock_config, folders, make_file):
        folders.get_props.return_value = DestinationProps(can_upload=True, accept="*")
        path = make_file("a.txt")
        transport = InstantTransport()

        with _patch_transport(transport), _patch_events():
            result = runner.invoke(cli, ["upload", "/docs/", str(path)])

        assert result.exit_code == 0, result.output
        assert [r.filename for r in transport.requests] == ["a.txt"]

    def test_comment_dropped_when_not_allowed(self, runner, mock_config, folders, make_file):
        folders.get_props.return_value = DestinationProps(can_upload=True, can_comment=False)
        path = make_file("a.txt")
        transport = InstantTransport()

        with _patch_transport(transport), _patch_events():
            result = runner.invoke(cli, ["upload", "/docs/", str(path), "-c", "hi"])

        assert result.exit_code == 0
        assert transport.requests[0].params["comment"] == ""

    def test_missing_profile(self, runner, make_file):
        path = make_file("a.txt")
        with patch("hfsupload.cli.common.Config.load", return_value=Config()):
            result = runner.invoke(cli, ["upload", "/docs/", str(path)])

        assert result.exit_code == 1


# =============================================================================
# Folder / Ping
# =============================================================================


class TestMkdir:
    """Tests for the mkdir command."""

    def test_creates(self, runner, mock_config):
        with patch("hfsupload.cli.folder.FolderService") as mock_cls:
            mock_cls.return_value.create_folder.return_value = "/docs/new/"
            result = runner.invoke(cli, ["mkdir", "/docs/", "new"])

        assert result.exit_code == 0
        assert "/docs/new/" in result.output
        mock_cls.return_value.create_folder.assert_called_once_with("/docs/", "new")

    def test_exists(self, runner, mock_config):
        with patch("hfsupload.cli.folder.FolderService") as mock_cls:
            mock_cls.return_value.create_folder.side_effect = ResourceExistsError("folder", "/docs/new")
            result = runner.invoke(cli, ["mkdir", "/docs/", "new"])

        assert result.exit_code == 1


class TestPing:
    def test_ping(self, runner, mock_config):
        info = {"url": "https://files.example.org", "status": "ok", "server": "HFS", "latency_ms": 12}
        with patch("hfsupload.core.client.HFSClient.ping", return_value=info):
            result = runner.invoke(cli, ["ping"])

        assert result.exit_code == 0
        assert "files.example.org" in result.output


# =============================================================================
# Config
# =============================================================================


@pytest.fixture
def config_file(tmp_path: Path):
    path = tmp_path / "config.yaml"
    with patch("hfsupload.cli.config_cmd.CONFIG_FILE", path), patch("hfsupload.core.config.CONFIG_FILE", path):
        yield path


class TestConfigCommands:
    """Tests for config init/show/use-context."""

    def test_init_writes_profile(self, runner, config_file: Path):
        result = runner.invoke(
            cli,
            ["config", "init", "--url", "https://files.example.org/", "--resume", "always", "--skip-existing"],
        )

        assert result.exit_code == 0, result.output
        data = yaml.safe_load(config_file.read_text())
        assert data["default_profile"] == "default"
        assert data["profiles"]["default"]["url"] == "https://files.example.org"
        assert data["profiles"]["default"]["resume"] == "always"
        assert data["profiles"]["default"]["skip_existing"] is True

    def test_init_existing_profile_needs_force(self, runner, config_file: Path):
        runner.invoke(cli, ["config", "init", "--url", "https://a.example.org"])

        result = runner.invoke(cli, ["config", "init", "--url", "https://b.example.org"])
        assert result.exit_code != 0

        result = runner.invoke(cli, ["config", "init", "--url", "https://b.example.org", "--force"])
        assert result.exit_code == 0
        assert "b.example.org" in config_file.read_text()

    def test_init_invalid_url(self, runner, config_file: Path):
        result = runner.invoke(cli, ["config", "init", "--url", "files.example.org"])
        assert result.exit_code == 1
        assert not config_file.exists()

    def test_show_without_config(self, runner, config_file: Path):
        result = runner.invoke(cli, ["config", "show"])
        assert result.exit_code == 1

    def test_show_json(self, runner, config_file: Path):
        runner.invoke(cli, ["config", "init", "--url", "https://files.example.org"])

        result = runner.invoke(cli, ["config", "show", "-o", "json"])

        assert result.exit_code == 0
        assert '"default_profile": "default"' in result.output

    def test_use_context(self, runner, config_file: Path):
        runner.invoke(cli, ["config", "init", "--url", "https://a.example.org"])
        runner.invoke(cli, ["config", "init", "--url", "https://b.example.org", "--profile", "prod"])

        result = runner.invoke(cli, ["config", "use-context", "prod"])
        assert result.exit_code == 0
        assert yaml.safe_load(config_file.read_text())["default_profile"] == "prod"

        result = runner.invoke(cli, ["config", "use-context", "missing"])
        assert result.exit_code == 1
