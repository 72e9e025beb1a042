"""Configuration loading, env-var expansion, and the edition counter."""

import os
import re
from pathlib import Path

import structlog
import yaml
from pydantic import ValidationError

from burrow.config.constants import (
    COMPONENT_CONFIG,
    CONFIG_PATH_ENV_VAR,
    DEFAULT_CONFIG_PATH,
    EDITION_KEY,
    SCHEDULE_KEY,
)
from burrow.config.schemas import BurrowConfig


logger = structlog.get_logger()

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)\}")
_EDITION_RE = re.compile(r"^edition:\s*(\d+)")


class ConfigValidationError(Exception):
    """Raised when configuration parsing or validation fails."""

    def __init__(self, errors: list[dict[str, str]], file_path: str) -> None:
        """Initialize the error.

        Args:
            errors: List of validation error details (``loc``, ``msg``, ``type``).
            file_path: Path to the file that failed validation.
        """
        self.errors = errors
        self.file_path = file_path
        super().__init__(f"Validation failed for {file_path}: {len(errors)} errors")


def expand_env_vars(text: str, environ: dict[str, str] | None = None) -> str:
    """Expand ``${VAR}`` and ``${VAR:-default}`` references.

    Unset variables without a default are left as written.

    Args:
        text: Raw config text.
        environ: Environment mapping (defaults to ``os.environ``).

    Returns:
        Text with references replaced.
    """
    env = os.environ if environ is None else environ

    def _replace(match: re.Match[str]) -> str:
        name, sep, default = match.group(1).partition(":-")
        if name in env:
            return env[name]
        if sep:
            return default
        return match.group(0)

    return _ENV_VAR_RE.sub(_replace, text)


def resolve_config_path(explicit: str | Path | None = None) -> Path:
    """Pick the config file path.

    Args:
        explicit: Path given on the command line.

    Returns:
        The explicit path, else ``$BURROW_CONFIG``, else the default.
    """
    if explicit:
        return Path(explicit)
    return Path(os.environ.get(CONFIG_PATH_ENV_VAR) or DEFAULT_CONFIG_PATH)


def load_config(path: str | Path) -> BurrowConfig:
    """Load and validate a config file.

    Args:
        path: Path to config.yaml.

    Returns:
        Validated, immutable configuration.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the YAML is malformed or invalid.
    """
    path = Path(path)
    log = logger.bind(component=COMPONENT_CONFIG, file_path=str(path))
    log.info("loading_config_file")

    raw = path.read_text(encoding="utf-8")

    try:
        data = yaml.safe_load(expand_env_vars(raw)) or {}
    except yaml.YAMLError as e:
        errors = [{"loc": "yaml", "msg": str(e), "type": "yaml_parse_error"}]
        log.error("config_yaml_parse_error", error=str(e))
        raise ConfigValidationError(errors, str(path)) from e

    if not isinstance(data, dict):
        errors = [
            {"loc": "root", "msg": "top level must be a mapping", "type": "type_error"}
        ]
        log.error("config_validation_failed", errors=errors)
        raise ConfigValidationError(errors, str(path))

    try:
        config = BurrowConfig.model_validate(data)
    except ValidationError as e:
        errors = [
            {
                "loc": ".".join(str(loc) for loc in err["loc"]),
                "msg": err["msg"],
                "type": err["type"],
            }
            for err in e.errors()
        ]
        log.error(
            "config_validation_failed",
            validation_error_count=len(errors),
            errors=errors,
        )
        raise ConfigValidationError(errors, str(path)) from e

    log.info(
        "config_loaded",
        edition=config.edition,
        source_count=len(config.sources),
    )
    return config


def increment_edition(path: str | Path) -> int:
    """Bump the edition counter in place.

    Edits the raw file line by line so ``${...}`` placeholders and
    comments survive. A missing ``edition:`` line is inserted after
    ``schedule:`` or at the top.

    Args:
        path: Path to config.yaml.

    Returns:
        The new edition number.

    Raises:
        OSError: If the file cannot be read or written.
    """
    path = Path(path)
    lines = path.read_text(encoding="utf-8").split("\n")

    new_edition = 1
    for index, line in enumerate(lines):
        if line.startswith(EDITION_KEY):
            match = _EDITION_RE.match(line)
            current = int(match.group(1)) if match else 0
            new_edition = current + 1
            lines[index] = f"edition: {new_edition}"
            break
    else:
        insert_at = next(
            (i + 1 for i, line in enumerate(lines) if line.startswith(SCHEDULE_KEY)),
            0,
        )
        lines.insert(insert_at, f"edition: {new_edition}")

    # Write to temp file then rename for atomicity
    temp_path = path.with_suffix(path.suffix + ".tmp")
    temp_path.write_text("\n".join(lines), encoding="utf-8")
    temp_path.replace(path)

    logger.info(
        "edition_incremented",
        component=COMPONENT_CONFIG,
        file_path=str(path),
        edition=new_edition,
    )
    return new_edition
