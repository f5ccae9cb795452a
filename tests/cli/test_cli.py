"""Test the command-line interface."""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from museai.cli import main
from museai.config.settings import APIConfig, MuseConfig
from museai.core.models import NO_CHANGES, CoverByFile, CoverByTimestamp, Failure, Success


@pytest.fixture
def settings():
    return MuseConfig(api=APIConfig(api_key="cli-key"))


@pytest.fixture
def mock_client(settings):
    """Patch config loading and the API client used by the CLI."""
    with patch("museai.cli.load_config", return_value=settings), \
            patch("museai.cli.MuseClient") as mock_client_class:
        yield mock_client_class.return_value


def invoke(*args):
    return CliRunner().invoke(main, list(args))


class TestCommands:
    """Test CLI commands against a mocked client."""

    def test_help(self):
        result = invoke("--help")
        assert result.exit_code == 0
        assert "Manage muse.ai collections and videos" in result.output
        assert "create-collection" in result.output

    def test_collections_prints_json(self, mock_client):
        """Test successful results are printed as JSON."""
        mock_client.list_collections.return_value = Success([{"scid": "c1", "name": "One"}])

        result = invoke("collections")

        assert result.exit_code == 0
        assert json.loads(result.output) == [{"scid": "c1", "name": "One"}]

    def test_failure_exits_non_zero(self, mock_client):
        """Test vendor errors exit with status 1."""
        mock_client.get_video.return_value = Failure("bad key")

        result = invoke("video", "svid1")

        assert result.exit_code == 1
        assert '"error": "bad key"' in result.output

    def test_create_collection(self, mock_client):
        mock_client.create_collection.return_value = Success({"scid": "new"})

        result = invoke("create-collection", "Name", "--visibility", "public")

        assert result.exit_code == 0
        mock_client.create_collection.assert_called_once_with("Name", "public")

    def test_create_collection_rejects_bad_visibility(self, mock_client):
        result = invoke("create-collection", "Name", "--visibility", "secret")
        assert result.exit_code == 2
        mock_client.create_collection.assert_not_called()

    def test_upload(self, mock_client, temp_dir):
        """Test uploads open the file and pass optional fields."""
        video = temp_dir / "test.mp4"
        video.write_bytes(b"mp4")
        mock_client.upload_video.return_value = Success({"fid": "f1"})

        result = invoke("upload", str(video), "--collection", "c1", "--visibility", "unlisted")

        assert result.exit_code == 0
        args = mock_client.upload_video.call_args.args
        assert str(args[0].name) == str(video)
        assert args[1:] == ("c1", "unlisted")

    def test_upload_missing_file(self, mock_client, temp_dir):
        """Test an invalid local path aborts before any call."""
        result = invoke("upload", str(temp_dir / "missing.mp4"))

        assert result.exit_code == 2
        mock_client.upload_video.assert_not_called()

    def test_update_no_changes(self, mock_client):
        mock_client.update_video.return_value = NO_CHANGES

        result = invoke("update", "fid1")

        assert result.exit_code == 0
        assert "No changes requested" in result.output
        mock_client.update_video.assert_called_once_with("fid1", None, None, None, [])

    def test_update_domains(self, mock_client):
        mock_client.update_video.return_value = Success({"ok": 1})

        invoke("update", "fid1", "--title", "T", "--domain", "a.com", "--domain", "b.com")

        mock_client.update_video.assert_called_once_with("fid1", None, "T", None, ["a.com", "b.com"])

    def test_ingesting(self, mock_client):
        mock_client.get_video.return_value = Success({"ingesting": 1})
        assert invoke("ingesting", "svid1").output.strip() == "Ingesting"

        mock_client.get_video.return_value = Success({"svid": "svid1"})
        assert invoke("ingesting", "svid1").output.strip() == "Ready"

    def test_ingesting_lookup_failure(self, mock_client):
        """Test a failed lookup is reported instead of printing Ready."""
        mock_client.get_video.return_value = Failure("video not found")

        result = invoke("ingesting", "svid1")

        assert result.exit_code == 1
        assert "video not found" in result.output
        assert "Ready" not in result.output

    def test_cover_by_time(self, mock_client):
        mock_client.change_video_cover.return_value = Success({"ok": 1})

        result = invoke("cover", "fid1", "--time", "52")

        assert result.exit_code == 0
        mock_client.change_video_cover.assert_called_once_with("fid1", CoverByTimestamp(52))

    def test_cover_by_file(self, mock_client, temp_dir):
        image = temp_dir / "cover.png"
        image.write_bytes(b"png")
        mock_client.change_video_cover.return_value = Success({"ok": 1})

        result = invoke("cover", "fid1", "--file", str(image))

        assert result.exit_code == 0
        fid, cover = mock_client.change_video_cover.call_args.args
        assert fid == "fid1"
        assert isinstance(cover, CoverByFile)

    def test_cover_rejects_both(self, mock_client, temp_dir):
        image = temp_dir / "cover.png"
        image.write_bytes(b"png")

        result = invoke("cover", "fid1", "--time", "5", "--file", str(image))

        assert result.exit_code == 2
        assert "not both" in result.output

    def test_analysis(self, mock_client):
        mock_client.get_video_analysis.return_value = Success([])

        result = invoke("analysis", "faces", "svid1")

        assert result.exit_code == 0
        mock_client.get_video_analysis.assert_called_once_with("faces", "svid1")

    def test_api_key_option_overrides_config(self):
        """Test --api-key replaces the configured key."""
        with patch("museai.cli.load_config", return_value=MuseConfig()), \
                patch("museai.cli.MuseClient") as mock_client_class:
            mock_client_class.return_value.list_videos.return_value = Success([])

            result = invoke("--api-key", "override", "videos")

        assert result.exit_code == 0
        assert mock_client_class.call_args.args[0].api_key == "override"

    def test_missing_api_key(self, monkeypatch):
        """Test commands refuse to run without an API key."""
        monkeypatch.delenv("MUSEAI_API_KEY", raising=False)
        with patch("museai.cli.load_config", return_value=MuseConfig()):
            result = invoke("videos")

        assert result.exit_code == 2
        assert "No API key configured" in result.output


class TestOfflineCommands:
    """Test commands that make no API calls."""

    def test_thumbnail(self, settings):
        with patch("museai.cli.load_config", return_value=settings):
            result = invoke("thumbnail", "a" * 70, "--time", "52")

        assert result.exit_code == 0
        assert result.output.strip() == f"https://cdn.muse.ai/w/{'a' * 64}/thumbnails/00052.jpg"

    def test_init_config(self, settings, temp_dir):
        output = temp_dir / "museai.yaml"
        with patch("museai.cli.load_config", return_value=settings):
            result = invoke("init-config", str(output))

        assert result.exit_code == 0
        assert output.exists()
        assert "Sample configuration created" in result.output
