# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets (the VAPID private key in particular). Use:
- .env (local, gitignored)
- config_local.py (local safe overrides, gitignored)

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "LIFEOS_APP_NAME": "App display name (default: lifeos).",
    "LIFEOS_LOG_LEVEL": "Console logging level (default: INFO).",
    # Switches
    "LIFEOS_CONSOLE_ENABLED": "Enable the operator console (true/false).",
    "LIFEOS_SCHEDULER_ENABLED": "Run the reminder scheduler (true/false).",
    # Scheduler
    "LIFEOS_REMINDER_INTERVAL_SECONDS": "Tick interval in seconds (default: 60).",
    "LIFEOS_TIMEZONE": "IANA zone for task dates/times, e.g. Europe/Berlin (default: server local).",
    # Push
    "LIFEOS_VAPID_PUBLIC_KEY": "VAPID public key, base64url (PUBLIC_VAPID_KEY also accepted).",
    "LIFEOS_VAPID_PRIVATE_KEY": "VAPID private key (PRIVATE_VAPID_KEY also accepted).",
    "LIFEOS_VAPID_SUBJECT": "VAPID 'sub' claim (default: mailto:user@example.com).",
    "LIFEOS_PUSH_MAX_CONCURRENCY": "Max concurrent push sends per dispatch (default: 16).",
    "LIFEOS_PUSH_TTL_SECONDS": "Web Push TTL header (default: 3600).",
    "LIFEOS_PUSH_TIMEOUT_SECONDS": "HTTP timeout per push send (default: 10).",
    # Notification
    "LIFEOS_NOTIFICATION_TITLE": "Notification title (default: LifeOS Reminder).",
    "LIFEOS_NOTIFICATION_ICON": "Notification icon path (default: /icon.png).",
    # Paths (gitignored)
    "LIFEOS_DATA_DIR": "Local data directory (default: .local/lifeos).",
    "LIFEOS_DB_PATH": "SQLite path for tasks + subscriptions (default: <data_dir>/lifeos.sqlite3).",
}
