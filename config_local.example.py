# config_local.example.py

"""
Example local overrides.

Usage:
  1) Copy this file to `config_local.py`
  2) Adjust values for your machine
  3) Never commit `config_local.py` (it is gitignored)

Prefer `.env`. This file should contain only a couple of machine-specific switches.
"""

# Example: work offline on the local slot only
# REMOTE_ENABLED = False

# Example: keep local slots next to a synced folder
# from pathlib import Path
# DATA_DIR = Path("~/Sync/weekly-status").expanduser()
