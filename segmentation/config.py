"""
Parser Configuration

Holds the read-only configuration handed to every parse: a debug flag, the
display-name to canonical-name map and the emoji-code map. Shape errors are
raised as ConfigurationError at construction time, before any transcript is
touched.
"""

import json
import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv

from .exceptions import ConfigurationError

ENV_DEBUG = "SEGMENTATION_DEBUG"
ENV_USER_MAP = "SEGMENTATION_USER_MAP_JSON"
ENV_EMOJI_MAP = "SEGMENTATION_EMOJI_MAP_JSON"

TRUTHY_VALUES = {"1", "true", "yes", "on"}


def _validate_string_map(name: str, value: Any) -> Mapping[str, str]:
    """
    Validate a string-to-string map and return a read-only view of a copy.

    Args:
        name: Field name used in error messages
        value: Candidate mapping

    Returns:
        Read-only mapping

    Raises:
        ConfigurationError: If the value is not a mapping of strings to strings
    """
    if value is None:
        return MappingProxyType({})
    if not isinstance(value, Mapping):
        raise ConfigurationError(
            f"{name} must be a mapping of strings, got {type(value).__name__}"
        )
    for key, mapped in value.items():
        if not isinstance(key, str) or not isinstance(mapped, str):
            raise ConfigurationError(
                f"{name} entries must map str to str, got {key!r}: {mapped!r}"
            )
    return MappingProxyType(dict(value))


def _parse_json_map(name: str, raw: Optional[str]) -> Dict[str, str]:
    if raw is None or not raw.strip():
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"{name} is not valid JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise ConfigurationError(f"{name} must be a JSON object")
    return parsed


@dataclass(frozen=True)
class ParserConfig:
    """Read-only configuration for a single parse."""

    debug: bool = False
    user_map: Mapping[str, str] = field(default_factory=dict)
    emoji_map: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        """Validate field shapes after initialization."""
        if not isinstance(self.debug, bool):
            raise ConfigurationError(
                f"debug must be a bool, got {type(self.debug).__name__}"
            )
        object.__setattr__(
            self, "user_map", _validate_string_map("user_map", self.user_map)
        )
        object.__setattr__(
            self, "emoji_map", _validate_string_map("emoji_map", self.emoji_map)
        )

    def resolve_author(self, display_name: str) -> str:
        """Map a display name to its canonical name, if one is configured."""
        return self.user_map.get(display_name, display_name)

    @classmethod
    def from_json_strings(
        cls,
        user_map_json: Optional[str] = None,
        emoji_map_json: Optional[str] = None,
        debug: bool = False,
    ) -> "ParserConfig":
        """
        Build a configuration from the JSON strings a settings store keeps.

        Args:
            user_map_json: JSON object of display name -> canonical name
            emoji_map_json: JSON object of emoji code -> glyph
            debug: Whether the debug trace is enabled

        Returns:
            Validated ParserConfig
        """
        return cls(
            debug=debug,
            user_map=_parse_json_map("user_map", user_map_json),
            emoji_map=_parse_json_map("emoji_map", emoji_map_json),
        )

    @classmethod
    def from_env(cls, **overrides: Any) -> "ParserConfig":
        """
        Build a configuration from environment variables (and a .env file).

        Keyword overrides take precedence over the environment.
        """
        load_dotenv()

        debug = overrides.pop(
            "debug", os.getenv(ENV_DEBUG, "false").strip().lower() in TRUTHY_VALUES
        )
        user_map = overrides.pop(
            "user_map", _parse_json_map("user_map", os.getenv(ENV_USER_MAP))
        )
        emoji_map = overrides.pop(
            "emoji_map", _parse_json_map("emoji_map", os.getenv(ENV_EMOJI_MAP))
        )
        if overrides:
            raise ConfigurationError(
                f"Unknown configuration keys: {', '.join(sorted(overrides))}"
            )
        return cls(debug=debug, user_map=user_map, emoji_map=emoji_map)
