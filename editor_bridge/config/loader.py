from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from editor_bridge.config.models import AdapterSettings


def _extract_yaml(content: str) -> str:
    """Return the first ```yaml fenced block, or the whole text if there is none."""
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

    if found_block:
        return "\n".join(yaml_lines)
    return content


def settings_from_mapping(data: Mapping[str, Any] | None) -> AdapterSettings:
    """
    Build adapter settings from an already parsed mapping.
    Raises ValueError if the mapping does not fit the settings schema.
    """
    try:
        return AdapterSettings.model_validate(dict(data or {}))
    except ValidationError as e:
        raise ValueError(f"Adapter settings validation failed:\n{e}") from e


def load_settings(path: Path) -> AdapterSettings:
    """
    Load and validate the adapter settings file.
    Raises FileNotFoundError if file missing.
    Raises ValueError if YAML or schema invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found at: {path}")

    with open(path) as f:
        content = f.read()

    try:
        data = yaml.safe_load(_extract_yaml(content))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in settings file: {e}") from e

    if data is not None and not isinstance(data, Mapping):
        raise ValueError("Settings file must contain a mapping at the top level")

    return settings_from_mapping(data)
