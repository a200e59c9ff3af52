"""
Task subsystem.

Components:
- task_models.py: Task dataclass and reminder constants
- task_store.py: SQLite-backed storage + candidate query / notified flag
- reminder_matcher.py: pure "which reminders are due this minute" logic
- reminder_scheduler.py: fixed-rate loop that dispatches due reminders
- task_api.py: small high-level helpers used by the rest of the app
"""
