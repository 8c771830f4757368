# CFO Bot - Financial clarity application for small-business founders
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for CFO Bot.

This module is responsible for:
- loading the main application configuration from a TOML file,
- applying defaults when no configuration file is present,
- exposing typed dataclasses used by the rest of the application.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover - fallback for older Python
    import tomli as tomllib  # type: ignore[import]

from .categorization import HISTORY_WINDOW
from .db import DatabaseConfig
from .forecast import ForecastAssumptions

DEFAULT_CONFIG_FILE = "cfo_bot_config.toml"
DEFAULT_DB_PATH = "data/db/cfo_bot.sqlite"

DISPLAY_MODES: tuple[str, ...] = ("table", "csv", "both")
LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class AdvisorConfig:
    """
    Settings of the LLM-backed advisor.

    `api_key_env` names the environment variable holding the API key; the
    key itself never lives in the configuration file.
    """

    model: str = "gpt-4o-mini"
    api_key_env: str = "OPENAI_API_KEY"
    history_messages: int = 10


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for CFO Bot.

    This aggregates:
    - the database configuration (where everything is stored),
    - the default forecast assumptions,
    - the size of the line-item history used for category suggestions,
    - the advisor settings,
    - display options for tables and exports,
    - the default logging level.
    """

    database: DatabaseConfig
    forecast_defaults: ForecastAssumptions
    history_window: int
    advisor: AdvisorConfig
    display_mode: str
    currency: str
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
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Invalid TOML root type in {path}, expected a table.")

    return data


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = raw.get(name) or {}
    if not isinstance(section, Mapping):
        raise ValueError(f"Config section [{name}] must be a table.")
    return section


def _as_int(section: Mapping[str, Any], key: str, default: int, where: str) -> int:
    raw_value = section.get(key, default)
    if isinstance(raw_value, bool):
        raise ValueError(f"Invalid value for '{where}.{key}': expected an integer.")
    try:
        return int(raw_value)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"Invalid value for '{where}.{key}' in the configuration. "
            "Expected an integer."
        ) from exc


def _as_float(section: Mapping[str, Any], key: str, default: float, where: str) -> float:
    raw_value = section.get(key, default)
    if isinstance(raw_value, bool):
        raise ValueError(f"Invalid value for '{where}.{key}': expected a number.")
    try:
        return float(raw_value)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"Invalid value for '{where}.{key}' in the configuration. "
            "Expected a number."
        ) from exc


def _parse_forecast(raw: Mapping[str, Any]) -> ForecastAssumptions:
    section = _section(raw, "forecast")

    months = _as_int(section, "months", 12, "forecast")
    if months < 1:
        raise ValueError("'forecast.months' must be at least 1.")

    return ForecastAssumptions(
        revenue_growth_pct=_as_float(section, "revenue_growth_pct", 0.0, "forecast"),
        expense_change_pct=_as_float(section, "expense_change_pct", 0.0, "forecast"),
        months_to_forecast=months,
    )


def _parse_advisor(raw: Mapping[str, Any]) -> AdvisorConfig:
    section = _section(raw, "advisor")

    history_messages = _as_int(section, "history_messages", 10, "advisor")
    if history_messages < 0:
        raise ValueError("'advisor.history_messages' cannot be negative.")

    return AdvisorConfig(
        model=str(section.get("model") or "gpt-4o-mini"),
        api_key_env=str(section.get("api_key_env") or "OPENAI_API_KEY"),
        history_messages=history_messages,
    )


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the CFO Bot application configuration from a TOML file.

    Expected top-level sections in the TOML file
    --------------------------------------------
    [database]
        Database engine and SQLite file path.

    [forecast]
        Default horizon (`months`) and monthly growth assumptions used when
        the CLI does not override them.

    [categorization]
        `history_window`: number of past line items consulted when
        suggesting categories.

    [advisor]
        LLM model name, the environment variable holding the API key and the
        number of past conversation messages included in chat prompts.

    [display]
        Output mode for tables ("table", "csv" or "both") and the currency
        used when formatting amounts.

    [logging]
        Default logging level.

    Every section is optional.

    Notes
    -----
    - When `config_path` is None and `cfo_bot_config.toml` does not exist in
      the current directory, built-in defaults are used. An explicitly
      requested file that does not exist is an error.
    - All file paths in the TOML are resolved relative to the directory of
      the TOML file itself.

    Raises
    ------
    FileNotFoundError
        If an explicitly requested configuration file does not exist.
    ValueError
        If the file cannot be parsed or holds invalid values.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILE).resolve()
        raw = _load_toml(config_file) if config_file.is_file() else {}
    else:
        config_file = Path(config_path).resolve()
        raw = _load_toml(config_file)

    base_dir = config_file.parent

    # 1) Database section
    database_section = _section(raw, "database")
    db_engine = str(database_section.get("engine") or "sqlite")
    db_path_raw = database_section.get("path") or DEFAULT_DB_PATH
    db_path = (base_dir / str(db_path_raw)).resolve()

    database_config = DatabaseConfig(engine=db_engine, path=db_path)

    # 2) Forecast defaults
    forecast_defaults = _parse_forecast(raw)

    # 3) Categorization
    categorization_section = _section(raw, "categorization")
    history_window = _as_int(
        categorization_section, "history_window", HISTORY_WINDOW, "categorization"
    )
    if history_window < 0:
        raise ValueError("'categorization.history_window' cannot be negative.")

    # 4) Advisor
    advisor = _parse_advisor(raw)

    # 5) Display options
    display_section = _section(raw, "display")
    display_mode = str(display_section.get("mode", "table")).lower()
    if display_mode not in DISPLAY_MODES:
        allowed = ", ".join(DISPLAY_MODES)
        raise ValueError(
            f"Invalid value for 'display.mode': {display_mode!r}. "
            f"Expected one of: {allowed}."
        )
    currency = str(display_section.get("currency") or "USD")

    # 6) Logging
    logging_section = _section(raw, "logging")
    log_level = str(logging_section.get("level", "WARNING")).upper()
    if log_level not in LOG_LEVELS:
        raise ValueError(f"Invalid value for 'logging.level': {log_level!r}.")

    return AppConfig(
        database=database_config,
        forecast_defaults=forecast_defaults,
        history_window=history_window,
        advisor=advisor,
        display_mode=display_mode,
        currency=currency,
        log_level=log_level,
    )
