"""Config loading utilities for seqnum."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from seqnum.core.errors import ConfigError
from seqnum.core.models import SequenceConfig, Settings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "numbering.yaml"


def load_numbering_config(path: Path) -> dict[str, Any]:
    """Load a numbering YAML file as a dict.

    Returns empty dict if the file doesn't exist.
    """
    if not path.exists():
        logger.debug("No numbering config found at %s; using defaults", path)
        return {}

    logger.info("Loading numbering config from %s", path)
    with path.open() as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Cannot parse {path}: {e}") from e

    if not isinstance(data, dict):
        logger.warning("%s did not contain a mapping; using empty dict", path.name)
        return {}

    return data


def make_settings(data: dict[str, Any]) -> Settings:
    """Build :class:`Settings` from the ``settings`` section.

    Only fields present in the section override the defaults.
    """
    section = data.get("settings", {})
    if not isinstance(section, dict):
        logger.warning("'settings' key is not a mapping; ignoring")
        section = {}

    valid_fields = Settings.model_fields
    filtered = {k: v for k, v in section.items() if k in valid_fields}

    if dropped := set(section) - set(filtered):
        logger.warning("Ignoring unknown settings keys: %s", sorted(dropped))

    try:
        return Settings(**filtered)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e


def make_sequence_configs(data: dict[str, Any]) -> dict[str, SequenceConfig]:
    """Build one :class:`SequenceConfig` per entry of the ``sequences`` section.

    The entry name doubles as the counter key unless the entry sets ``key``.

    Example::

        sequences:
          invoice:
            pattern: "IV{Y}-{#|6|y}"
          document:
            pattern: "DOC-{#|6}"
            segment: "{DocumentType}"
            segments:
              - {value: OFFER, pattern: "AG-{y}{m}-{#|4|y}"}
    """
    section = data.get("sequences", {})
    if not isinstance(section, dict):
        logger.warning("'sequences' key is not a mapping; ignoring")
        return {}

    configs: dict[str, SequenceConfig] = {}
    for name, body in section.items():
        if body is None:
            body = {}
        if not isinstance(body, dict):
            logger.warning("Sequence '%s' is not a mapping; skipping", name)
            continue
        try:
            configs[name] = SequenceConfig.model_validate({"key": name, **body})
        except ValidationError as e:
            raise ConfigError(f"Invalid sequence '{name}': {e}") from e

    return configs
