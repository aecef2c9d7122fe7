"""
Settings loader (``payroll_config.loader``).

Responsibility
--------------
Reads a YAML settings file, applies ``PAYROLL_*`` environment overrides
and returns a validated ``PayrollSettings``.

Invariants enforced
-------------------
* Environment overrides win over the file; the file wins over defaults.
* ``compute_checksum`` is deterministic for equal settings.

Failure modes
-------------
* Missing explicit YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown keys or invalid values  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from payroll_config.schema import PayrollSettings

DEFAULT_SETTINGS_PATH = Path(__file__).parent / "payroll.yaml"

ENV_OVERRIDES: dict[str, str] = {
    "PAYROLL_DATABASE_URL": "database_url",
    "PAYROLL_LOG_LEVEL": "log_level",
    "PAYROLL_DEFAULT_CURRENCY": "default_currency",
    "PAYROLL_NEGATIVE_NET_POLICY": "negative_net_policy",
}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")
    return data


def load_settings(
    path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> PayrollSettings:
    """
    Load settings from ``path`` (default: the packaged payroll.yaml).

    A ``payroll`` top-level key is unwrapped when present so the settings
    can share a file with other sections.
    """
    settings_path = Path(path) if path is not None else DEFAULT_SETTINGS_PATH
    data = load_yaml_file(settings_path)
    if isinstance(data.get("payroll"), dict):
        data = data["payroll"]

    env = os.environ if environ is None else environ
    for var, key in ENV_OVERRIDES.items():
        value = env.get(var)
        if value:
            data[key] = value

    return PayrollSettings.from_dict(data)


def compute_checksum(settings: PayrollSettings) -> str:
    """SHA-256 of the canonical JSON form of ``settings``."""
    canonical = json.dumps(settings.to_dict(), sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
