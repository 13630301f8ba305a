"""Loading deploy options from JSON config files and plain mappings."""

from __future__ import annotations

import json
import os
from dataclasses import fields
from typing import Any, Mapping

from .deploy import DeployOptions
from .exceptions import ConfigurationError

# Original (camelCase) option names -> DeployOptions fields
_ALIASES = {
    "tagMessage": "tag_message",
    "srcIgnorePatterns": "src_ignore_patterns",
    "repoIgnorePatterns": "repo_ignore_patterns",
    "postBuild": "post_sync",
    "postSync": "post_sync",
}

_FIELDS = {f.name for f in fields(DeployOptions)}

# Options that must be strings when given (None keeps the default or means unset)
_STRING_FIELDS = ("src", "url", "tmp", "branch", "message", "tag", "tag_message")


def load_config(path: str | os.PathLike[str]) -> dict[str, Any]:
    """Read a JSON config file whose top-level value is an object."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as exc:
        raise ConfigurationError(f"Cannot read config file {path}: {exc.strerror or exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Invalid JSON in config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a JSON object")
    return data


def normalize_keys(mapping: Mapping[str, Any]) -> dict[str, Any]:
    """Translate camelCase keys to field names, rejecting unknown keys."""
    result: dict[str, Any] = {}
    for key, value in mapping.items():
        name = _ALIASES.get(key, key)
        if name not in _FIELDS:
            raise ConfigurationError(f"Unknown deploy option: {key}")
        result[name] = value
    return result


def options_from_mapping(mapping: Mapping[str, Any]) -> DeployOptions:
    """Build :class:`DeployOptions` from a mapping.

    Accepts both the snake_case field names and the camelCase names
    (``srcIgnorePatterns``, ``tagMessage``, ...).  ``tag: false`` means no
    tag.  Missing keys keep their defaults; ``tmp: null`` falls back to the
    default scratch directory.
    """
    values = normalize_keys(mapping)
    if values.get("tag") is False:
        values["tag"] = None
    if values.get("tmp") is None:
        values.pop("tmp", None)
    for name in _STRING_FIELDS:
        value = values.get(name)
        if value is not None and not isinstance(value, str):
            raise ConfigurationError(
                f"Deploy option {name} must be a string, not {type(value).__name__}"
            )
    post_sync = values.get("post_sync")
    if post_sync is not None and not callable(post_sync):
        raise ConfigurationError("post_sync must be callable")
    return DeployOptions(**values)
