# PinBank - Small ledger engine for PIN-protected accounts
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for PinBank.

This module is responsible for:
- loading the application configuration from a TOML file,
- applying built-in defaults when no configuration file is present,
- exposing typed dataclasses used by the rest of the application.

Expected sections (all optional)
--------------------------------
[store]
    path              -- account store, relative to the TOML file
    malformed_policy  -- "skip" | "abort"

[ledger]
    base_id           -- first account id (default 1001)

[auth]
    algorithm         -- "sha256" | "pbkdf2"
    pbkdf2_iterations -- iteration count for "pbkdf2"

[display]
    mode              -- "table" | "csv" | "both"

[logging]
    level             -- DEBUG, INFO, WARNING, ERROR, CRITICAL
"""

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover - fallback for older Python
    import tomli as tomllib  # type: ignore[import]

from .logging_config import LOG_LEVELS
from .storage import DEFAULT_BASE_ID, MALFORMED_POLICIES

DEFAULT_CONFIG_FILE = "pinbank_config.toml"
DEFAULT_STORE_PATH = "accounts.tsv"
AUTH_ALGORITHMS = ("sha256", "pbkdf2")
DISPLAY_MODES = ("table", "csv", "both")


@dataclass(frozen=True)
class StoreConfig:
    """Where accounts are persisted and how malformed lines are handled."""

    path: Path
    malformed_policy: str


@dataclass(frozen=True)
class AuthConfig:
    """PIN digest algorithm selection."""

    algorithm: str
    pbkdf2_iterations: int


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for PinBank.

    This aggregates:
    - the account store location and malformed-line policy,
    - the ledger base id,
    - the PIN digest algorithm,
    - display and logging options.
    """

    store: StoreConfig
    base_id: int
    auth: AuthConfig
    display_mode: str
    log_level: str


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed or is not a table.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Invalid TOML root type in {path}, expected a table.")

    return data


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = raw.get(name) or {}
    if not isinstance(section, Mapping):
        raise ValueError(f"Config section [{name}] must be a table.")
    return section


def _choice(value: Any, allowed: tuple[str, ...], key: str) -> str:
    text = str(value)
    if text not in allowed:
        expected = ", ".join(repr(a) for a in allowed)
        raise ValueError(
            f"Invalid value {text!r} for '{key}'. Expected one of: {expected}."
        )
    return text


def _positive_int(value: Any, key: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Invalid value for '{key}'. Expected a positive integer.")
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"Invalid value for '{key}'. Expected a positive integer."
        ) from exc
    if number < 1:
        raise ValueError(f"Invalid value for '{key}'. Expected a positive integer.")
    return number


def parse_app_config(raw: Mapping[str, Any], base_dir: Path) -> AppConfig:
    """
    Build an AppConfig from parsed TOML data.

    Args:
        raw: Parsed TOML root dictionary (may be empty).
        base_dir: Directory used to resolve a relative store path.

    Raises:
        ValueError: if a value has the wrong type or is not an allowed choice.
    """
    store_section = _section(raw, "store")
    store_path_raw = store_section.get("path") or DEFAULT_STORE_PATH
    store_path = (base_dir / str(store_path_raw)).resolve()
    policy = _choice(
        store_section.get("malformed_policy", "skip"),
        MALFORMED_POLICIES,
        "store.malformed_policy",
    )

    ledger_section = _section(raw, "ledger")
    base_id = _positive_int(
        ledger_section.get("base_id", DEFAULT_BASE_ID), "ledger.base_id"
    )

    auth_section = _section(raw, "auth")
    algorithm = _choice(
        auth_section.get("algorithm", "sha256"), AUTH_ALGORITHMS, "auth.algorithm"
    )
    iterations = _positive_int(
        auth_section.get("pbkdf2_iterations", 100_000), "auth.pbkdf2_iterations"
    )

    display_section = _section(raw, "display")
    display_mode = _choice(
        display_section.get("mode", "table"), DISPLAY_MODES, "display.mode"
    )

    logging_section = _section(raw, "logging")
    log_level = _choice(
        str(logging_section.get("level", "WARNING")).upper(),
        LOG_LEVELS,
        "logging.level",
    )

    return AppConfig(
        store=StoreConfig(path=store_path, malformed_policy=policy),
        base_id=base_id,
        auth=AuthConfig(algorithm=algorithm, pbkdf2_iterations=iterations),
        display_mode=display_mode,
        log_level=log_level,
    )


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the PinBank configuration from a TOML file.

    When ``config_path`` is None, ``pinbank_config.toml`` in the current
    directory is used if it exists; otherwise built-in defaults apply and the
    store lives in ``accounts.tsv`` in the current directory. An explicit
    ``config_path`` must exist.

    Raises:
        FileNotFoundError: if an explicit config file does not exist.
        ValueError: if the file cannot be parsed or holds invalid values.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILE).resolve()
        if not config_file.is_file():
            return parse_app_config({}, Path.cwd())
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)
    return parse_app_config(raw, config_file.parent)
