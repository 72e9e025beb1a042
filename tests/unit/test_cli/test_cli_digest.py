"""Unit tests for the burrow CLI."""

import shutil
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from burrow.cli.digest import cli
from burrow.mailer import DeliveryError
from burrow.sources.base import FetchResult
from tests.helpers.sources import highlight_feed


FIXTURES_DIR = Path(__file__).parent.parent.parent / "fixtures" / "config"


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Copy the sample config into a scratch directory."""
    target = tmp_path / "config.yaml"
    shutil.copy(FIXTURES_DIR / "config.yaml", target)
    return target


@pytest.fixture
def pipeline() -> Iterator[MagicMock]:
    """Replace source building and collection with canned results."""
    results = [FetchResult(name="Readwise", data=highlight_feed())]
    with (
        patch("burrow.cli.digest.configure_logging"),
        patch("burrow.cli.digest.build_sources") as build_sources,
        patch("burrow.cli.digest.collect", return_value=results) as collect,
    ):
        build_sources.return_value = MagicMock(sources=(), enrichment=None)
        yield collect


@pytest.fixture
def mailer() -> Iterator[MagicMock]:
    """Replace the Resend mailer; yields the entered mailer instance."""
    with patch("burrow.cli.digest.ResendMailer") as mailer_cls:
        mailer_cls.load_header_image.return_value = None
        instance = mailer_cls.return_value.__enter__.return_value
        instance.send.return_value = "msg_1"
        instance.mailer_cls = mailer_cls
        yield instance


class TestValidateCommand:
    """Tests for `burrow validate`."""

    def test_valid_config(self, config_file: Path) -> None:
        """A valid config prints a summary."""
        with patch("burrow.cli.digest.configure_logging"):
            result = CliRunner().invoke(cli, ["validate", "--config", str(config_file)])

        assert result.exit_code == 0
        assert "Configuration is valid!" in result.output
        assert "Edition: 41" in result.output
        assert "Sources: 6" in result.output
        assert "- nitter" in result.output

    def test_invalid_config(self, tmp_path: Path) -> None:
        """Validation errors exit non-zero with their location."""
        path = tmp_path / "config.yaml"
        path.write_text("sources:\n  - type: reddit\n")

        with patch("burrow.cli.digest.configure_logging"):
            result = CliRunner().invoke(cli, ["validate", "--config", str(path)])

        assert result.exit_code == 1
        assert "Configuration validation failed" in result.output
        assert "sources.0" in result.output

    def test_missing_config(self, tmp_path: Path) -> None:
        """A missing file exits non-zero."""
        with patch("burrow.cli.digest.configure_logging"):
            result = CliRunner().invoke(
                cli, ["validate", "--config", str(tmp_path / "absent.yaml")]
            )

        assert result.exit_code == 1
        assert "not found" in result.output


class TestRunCommand:
    """Tests for `burrow run`."""

    def test_send_increments_edition(
        self, config_file: Path, pipeline: MagicMock, mailer: MagicMock
    ) -> None:
        """A regular run sends to `to` and bumps the edition."""
        result = CliRunner().invoke(cli, ["run", "--config", str(config_file)])

        assert result.exit_code == 0, result.output
        assert "Digest #42 sent successfully!" in result.output
        assert mailer.mailer_cls.call_args.kwargs["recipient"] == "reader@example.com"
        assert "edition: 42" in config_file.read_text()
        pipeline.assert_called_once()

    def test_test_send_keeps_edition(
        self, config_file: Path, pipeline: MagicMock, mailer: MagicMock
    ) -> None:
        """A test run sends to `test_to` and leaves the counter alone."""
        result = CliRunner().invoke(cli, ["run", "--config", str(config_file), "--test"])

        assert result.exit_code == 0, result.output
        assert mailer.mailer_cls.call_args.kwargs["recipient"] == "me@example.com"
        assert "edition: 41" in config_file.read_text()

    def test_delivery_failure(
        self, config_file: Path, pipeline: MagicMock, mailer: MagicMock
    ) -> None:
        """A rejected send exits non-zero without touching the counter."""
        mailer.send.side_effect = DeliveryError("rejected", status_code=401)

        result = CliRunner().invoke(cli, ["run", "--config", str(config_file)])

        assert result.exit_code == 1
        assert "rejected" in result.output
        assert "edition: 41" in config_file.read_text()

    def test_preview_writes_html(
        self, config_file: Path, pipeline: MagicMock, mailer: MagicMock
    ) -> None:
        """Preview renders to a file and never sends."""
        with patch("burrow.cli.digest.click.launch") as launch:
            result = CliRunner().invoke(
                cli, ["run", "--config", str(config_file), "--preview"]
            )

        assert result.exit_code == 0, result.output
        assert "HTML written to" in result.output
        launch.assert_called_once()
        preview_path = Path(launch.call_args.args[0])
        assert "Simplify, simplify." in preview_path.read_text()
        preview_path.unlink()
        mailer.send.assert_not_called()
        assert "edition: 41" in config_file.read_text()


def test_version() -> None:
    """--version prints the package version."""
    result = CliRunner().invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert "0.1.0" in result.output
