# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "SNAPTICK_APP_NAME": "App display name (default: snaptick).",
    "SNAPTICK_LOG_LEVEL": "Console logging level (default: INFO). The file log is always DEBUG.",
    "SNAPTICK_BUILD_VERSION": "Override the reported build version (default: installed package version).",
    # Connectors
    "SNAPTICK_CONSOLE_ENABLED": "Run the console REPL (true/false). When off, only reminders run.",
    # Paths (gitignored)
    "SNAPTICK_DATA_DIR": "Local data directory (default: .local/snaptick).",
    "SNAPTICK_TASKS_DB_PATH": "TaskStore SQLite path (default: <data_dir>/tasks.sqlite3).",
    "SNAPTICK_PREFS_DB_PATH": "PreferenceStore SQLite path (default: <data_dir>/prefs.sqlite3).",
    # Navigation drawer
    "SNAPTICK_PACKAGE_NAME": "Store package id used by /rate and /share.",
    "SNAPTICK_STORE_BASE_URL": "Store page prefix; the package id is appended.",
    "SNAPTICK_FEEDBACK_EMAIL": "Recipient for /report and /suggest mails.",
    # Reminders
    "SNAPTICK_NOTIFY_RETRY_ATTEMPTS": "Total attempts to arm a reminder after create/update (default: 2).",
}
