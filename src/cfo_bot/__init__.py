# CFO Bot - Financial clarity application for small-business founders
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
CFO Bot
-------

A financial clarity application for small-business founders. Founders
record monthly cash/revenue/expense snapshots, upload financial statements
whose lines are categorized automatically, project their cash forward, track
financial decisions and talk to an advisor grounded in their own numbers.

Main capabilities:
- monthly snapshots with trends, runway and largest changes,
- a deterministic month-by-month cash forecast with runway detection,
- category suggestions for statement lines, learning from past uploads,
- decision tracking with structured advisor analysis,
- advisor conversations grounded in the latest snapshot,
- a SQLite store and a command-line interface.

Computation (forecast, categorization, trends) is pure and separated from
storage (SQLite), configuration (TOML) and presentation (CLI).


Version: 0.1.0

Usage:
    cfo-bot --help
"""

__all__ = ["forecast", "categorization", "trends", "services"]

__version__ = "0.1.0"
