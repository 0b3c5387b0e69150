import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from src.config.models import Settings

ENV_PREFIX = "APP_"
ENV_NESTING = "__"


def _strip_code_fence(content: str) -> str:
    """Return the body of the first ```yaml block, or the whole text if there is none."""
    yaml_lines = []
    in_block = False
    found_block = False

    for line in content.splitlines():
        s_line = line.strip()
        if s_line.startswith("```yaml"):
            in_block = True
            found_block = True
            continue
        if in_block and s_line.startswith("```"):
            break
        if in_block:
            yaml_lines.append(line)

    return "\n".join(yaml_lines) if found_block else content


def apply_env_overrides(data: dict[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    """
    Overlay APP_<SECTION>__<FIELD> environment variables onto config data.

    e.g. APP_EMAIL_CLIENT__AUTHORIZATION_TOKEN sets email_client.authorization_token.
    Variables without the nesting separator are ignored.
    """
    merged = {k: dict(v) if isinstance(v, dict) else v for k, v in data.items()}
    for key, value in environ.items():
        if not key.startswith(ENV_PREFIX) or ENV_NESTING not in key:
            continue
        section, _, field_name = key[len(ENV_PREFIX) :].lower().partition(ENV_NESTING)
        if not section or not field_name:
            continue
        target = merged.setdefault(section, {})
        if isinstance(target, dict):
            target[field_name] = value
    return merged


def load_settings(path: Path, environ: Mapping[str, str] | None = None) -> Settings:
    """
    Load and validate the configuration file.
    Raises FileNotFoundError if file missing.
    Raises ValueError if YAML or schema invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found at: {path}")

    with open(path) as f:
        content = f.read()

    try:
        data = yaml.safe_load(_strip_code_fence(content)) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in configuration file: {e}") from e

    if not isinstance(data, dict):
        raise ValueError("Configuration file must contain a mapping at the top level")

    data = apply_env_overrides(data, os.environ if environ is None else environ)

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Configuration validation failed:\n{e}") from e
