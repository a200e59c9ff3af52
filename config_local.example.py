# config_local.example.py

"""
Example local overrides.

Usage:
  1) Copy this file to `config_local.py`
  2) Adjust values for your machine
  3) Never commit `config_local.py` (it is gitignored)

Prefer `.env` for secrets. This file should contain only safe overrides.
"""

# Example: headless server (scheduler only, no operator console)
# CONSOLE_ENABLED = False

# Example: keep the console but do not send anything
# SCHEDULER_ENABLED = False

# Example: faster ticks while testing reminders by hand
# REMINDER_INTERVAL_SECONDS = 10
