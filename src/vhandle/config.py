"""Engine configuration.

Configuration is an explicit ``EngineConfig`` value handed to the
engine at construction; nothing is read from process-wide state.  A
YAML file can supply it::

    handle:
      prefix: "10673"
      canonical_prefix: "https://hdl.handle.net/"
    versioning:
      enabled: true
      restore_note: "Restored from AIP"

Every key is optional.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from vhandle.grammar.grammar import DEFAULT_CANONICAL_PREFIX, EXAMPLE_PREFIX

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "vhandle.yaml"
DEFAULT_IDENTIFIER_FIELD = "dc.identifier.uri"
DEFAULT_RESTORE_NOTE = "Restored from external identifier"


class ConfigurationError(ValueError):
    """Raised when configuration is malformed or unusable."""


@dataclass(frozen=True)
class EngineConfig:
    """Settings for a ``HandleEngine``.

    Parameters
    ----------
    prefix:
        The naming-authority prefix generated handles are minted under.
        ``None`` means unconfigured; see ``effective_prefix``.
    canonical_prefix:
        Resolver URL prepended to a handle to form the value stored in
        the identifier metadata field.
    versioning_enabled:
        Must be ``True`` for a version-aware engine to be constructed.
    restore_note:
        Summary recorded on version records recreated by the restore path.
    identifier_field:
        The descriptive metadata field that holds identifier URIs.
    """

    prefix: str | None = None
    canonical_prefix: str = DEFAULT_CANONICAL_PREFIX
    versioning_enabled: bool = True
    restore_note: str = DEFAULT_RESTORE_NOTE
    identifier_field: str = field(default=DEFAULT_IDENTIFIER_FIELD)

    def effective_prefix(self) -> str:
        """Return the configured prefix, or the example prefix in degraded mode.

        Falling back is never an error; it is logged as a warning on
        every call.
        """
        if self.prefix:
            return self.prefix
        logger.warning("handle prefix is not configured; using %s", EXAMPLE_PREFIX)
        return EXAMPLE_PREFIX

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EngineConfig":
        """Build a config from the nested mapping layout shown in the module docstring.

        Raises
        ------
        ConfigurationError
            If a section is not a mapping or a value has the wrong type.
        """
        handle = _section(data, "handle")
        versioning = _section(data, "versioning")
        metadata = _section(data, "metadata")

        prefix = handle.get("prefix")
        if prefix is not None:
            prefix = str(prefix)
        enabled = versioning.get("enabled", True)
        if not isinstance(enabled, bool):
            raise ConfigurationError(f"versioning.enabled must be a boolean, got {enabled!r}")
        return cls(
            prefix=prefix,
            canonical_prefix=_text(handle, "canonical_prefix", DEFAULT_CANONICAL_PREFIX),
            versioning_enabled=enabled,
            restore_note=_text(versioning, "restore_note", DEFAULT_RESTORE_NOTE),
            identifier_field=_text(metadata, "identifier_field", DEFAULT_IDENTIFIER_FIELD),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the nested mapping ``from_dict`` accepts."""
        return {
            "handle": {"prefix": self.prefix, "canonical_prefix": self.canonical_prefix},
            "versioning": {"enabled": self.versioning_enabled, "restore_note": self.restore_note},
            "metadata": {"identifier_field": self.identifier_field},
        }


def load_config(path: Path | str | None = None) -> EngineConfig:
    """Load an ``EngineConfig`` from a YAML file.

    A missing file yields the defaults.

    Raises
    ------
    ConfigurationError
        If the file cannot be read or does not hold a YAML mapping.
    """
    config_path = Path(path) if path is not None else Path.cwd() / DEFAULT_CONFIG_NAME
    try:
        raw = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug("No configuration at %s; using defaults", config_path)
        return EngineConfig()
    except OSError as exc:
        raise ConfigurationError(f"Cannot read {config_path}: {exc}") from exc
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {exc}") from exc
    if data is None:
        return EngineConfig()
    if not isinstance(data, dict):
        raise ConfigurationError(f"{config_path} must contain a mapping at top level")
    return EngineConfig.from_dict(data)


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"Section {name!r} must be a mapping")
    return section


def _text(section: dict[str, Any], key: str, default: str) -> str:
    value = section.get(key, default)
    if not isinstance(value, str):
        raise ConfigurationError(f"{key} must be a string, got {value!r}")
    return value
