"""Centralized path definitions for smtpsend.

Single source of truth for the files the tool reads or writes.
"""

from pathlib import Path

# Base application directory
SMTPSEND_DIR = Path.home() / ".smtpsend"

# Subdirectories
LOGS_DIR = SMTPSEND_DIR / "logs"

# Specific files
CONFIG_PATH = SMTPSEND_DIR / "config.json"
