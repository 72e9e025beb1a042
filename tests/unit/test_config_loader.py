"""Unit tests for configuration loading and the edition counter."""

import shutil
from pathlib import Path

import pytest

from burrow.config.loader import (
    ConfigValidationError,
    expand_env_vars,
    increment_edition,
    load_config,
    resolve_config_path,
)
from burrow.config.schemas import SourceType


FIXTURES_DIR = Path(__file__).parent.parent / "fixtures" / "config"


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Copy the sample config into a scratch directory."""
    target = tmp_path / "config.yaml"
    shutil.copy(FIXTURES_DIR / "config.yaml", target)
    return target


class TestExpandEnvVars:
    """Tests for ${VAR} expansion."""

    def test_set_variable(self) -> None:
        """Set variables are substituted."""
        assert expand_env_vars("key: ${TOKEN}", {"TOKEN": "abc"}) == "key: abc"

    def test_default_used_when_unset(self) -> None:
        """The :- default applies to unset variables."""
        assert expand_env_vars("key: ${TOKEN:-fallback}", {}) == "key: fallback"

    def test_set_variable_beats_default(self) -> None:
        """A set variable wins over its default."""
        assert expand_env_vars("${TOKEN:-fallback}", {"TOKEN": "abc"}) == "abc"

    def test_unset_without_default_left_verbatim(self) -> None:
        """Unknown references are left as written."""
        assert expand_env_vars("key: ${MISSING}", {}) == "key: ${MISSING}"


class TestResolveConfigPath:
    """Tests for config path resolution."""

    def test_explicit_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """An explicit path beats the environment."""
        monkeypatch.setenv("BURROW_CONFIG", "/from/env.yaml")

        assert resolve_config_path("/explicit.yaml") == Path("/explicit.yaml")

    def test_env_var(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """BURROW_CONFIG is used without an explicit path."""
        monkeypatch.setenv("BURROW_CONFIG", "/from/env.yaml")

        assert resolve_config_path(None) == Path("/from/env.yaml")

    def test_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """The system path is the last resort."""
        monkeypatch.delenv("BURROW_CONFIG", raising=False)

        assert resolve_config_path(None) == Path("/etc/burrow/config.yaml")


class TestLoadConfig:
    """Tests for load_config."""

    def test_sample_config(
        self, config_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """The sample config loads with every source in order."""
        monkeypatch.setenv("READWISE_TOKEN", "rw-token")
        monkeypatch.delenv("RESEND_API_KEY", raising=False)
        monkeypatch.delenv("UNSPLASH_ACCESS_KEY", raising=False)

        config = load_config(config_file)

        assert config.edition == 41
        assert config.email.from_address == "Burrow <digest@example.com>"
        assert config.email.resend_api_key == "re_test"
        assert [s.type for s in config.sources] == [
            SourceType.WEATHER,
            SourceType.READWISE,
            SourceType.HACKERNEWS,
            SourceType.REDDIT,
            SourceType.NITTER,
            SourceType.UNSPLASH,
        ]
        assert config.sources[1].api_token == "rw-token"

    def test_subreddit_forms_merged(self, config_file: Path) -> None:
        """Single and list subreddit forms end up in one list."""
        config = load_config(config_file)

        reddit = config.sources_of_type(SourceType.REDDIT)[0]
        assert reddit.subreddits == ["python", "programming", "golang"]

    def test_unsplash_query_defaults(self, config_file: Path) -> None:
        """The header image query defaults to nature."""
        config = load_config(config_file)

        assert config.sources_of_type(SourceType.UNSPLASH)[0].query == "nature"

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.yaml")

    def test_malformed_yaml(self, tmp_path: Path) -> None:
        """Broken YAML is a validation error."""
        path = tmp_path / "config.yaml"
        path.write_text("sources: [unclosed\n")

        with pytest.raises(ConfigValidationError) as exc_info:
            load_config(path)

        assert exc_info.value.errors[0]["type"] == "yaml_parse_error"

    def test_unknown_source_type(self, tmp_path: Path) -> None:
        """Unknown source types are rejected with their location."""
        path = tmp_path / "config.yaml"
        path.write_text("sources:\n  - type: myspace\n")

        with pytest.raises(ConfigValidationError) as exc_info:
            load_config(path)

        assert exc_info.value.errors[0]["loc"].startswith("sources.0")

    def test_weather_requires_coordinates(self, tmp_path: Path) -> None:
        """A weather source without coordinates is rejected."""
        path = tmp_path / "config.yaml"
        path.write_text("sources:\n  - type: weather\n    name: Nowhere\n")

        with pytest.raises(ConfigValidationError) as exc_info:
            load_config(path)

        assert "latitude" in exc_info.value.errors[0]["msg"]

    def test_empty_file(self, tmp_path: Path) -> None:
        """An empty file is a valid, empty config."""
        path = tmp_path / "config.yaml"
        path.write_text("")

        config = load_config(path)

        assert config.sources == []
        assert config.edition == 0


class TestIncrementEdition:
    """Tests for the in-place edition counter."""

    def test_increments_and_preserves_placeholders(self, config_file: Path) -> None:
        """Only the edition line changes; ${...} references survive."""
        before = config_file.read_text()

        assert increment_edition(config_file) == 42

        after = config_file.read_text()
        assert "edition: 42" in after
        assert "${READWISE_TOKEN}" in after
        assert after.replace("edition: 42", "edition: 41") == before

    def test_nested_edition_key_untouched(self, tmp_path: Path) -> None:
        """Only a top-level edition line counts."""
        path = tmp_path / "config.yaml"
        path.write_text("schedule: daily\nsources:\n  - type: hackernews\n    edition: 3\n")

        assert increment_edition(path) == 1

        lines = path.read_text().split("\n")
        assert lines[1] == "edition: 1"
        assert "    edition: 3" in lines

    def test_inserted_at_top_without_schedule(self, tmp_path: Path) -> None:
        """Without schedule the counter goes on the first line."""
        path = tmp_path / "config.yaml"
        path.write_text("sources: []\n")

        increment_edition(path)

        assert path.read_text().startswith("edition: 1\n")

    def test_reload_sees_new_edition(self, config_file: Path) -> None:
        """The rewritten file still loads."""
        increment_edition(config_file)

        assert load_config(config_file).edition == 42
