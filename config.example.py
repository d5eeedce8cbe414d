# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Use:
- .env (local, gitignored)
- config_local.py (local safe overrides, gitignored)

This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "WEEKLY_APP_NAME": "App display name (default: weekly-status).",
    "WEEKLY_LOG_LEVEL": "Console logging level (default: INFO).",
    # Local slot (gitignored)
    "WEEKLY_DATA_DIR": "Local data directory for slots and logs (default: .local/weekly-status).",
    "WEEKLY_SLOT_KEY": "Current slot name (default: weekly-status-tracker:v2).",
    "WEEKLY_LEGACY_SLOT_KEY": "Read-only v1 slot migrated on first run (default: weekly-status-tracker:v1).",
    # Remote store (client side)
    "WEEKLY_REMOTE_ENABLED": "Talk to the state server at all (true/false, default: true).",
    "WEEKLY_REMOTE_BASE_URL": "State server URL (default: http://<server host>:<server port>).",
    "WEEKLY_STATE_ENDPOINT": "State endpoint path (default: /api/state).",
    "WEEKLY_REMOTE_TIMEOUT_SECONDS": "HTTP timeout for GET/PUT (default: 5.0).",
    "WEEKLY_SAVE_DEBOUNCE_MS": "Quiet period before a remote save is sent (default: 300).",
    # State server
    "WEEKLY_SERVER_HOST": "Bind address for `weekly-status serve` (default: 127.0.0.1).",
    "WEEKLY_SERVER_PORT": "Port for `weekly-status serve` (falls back to PORT, then 4173).",
    "WEEKLY_SERVER_DATA_FILE": "Server-side document file (default: data/weekly-status.json).",
    "WEEKLY_MAX_BODY_BYTES": "Largest accepted PUT body in bytes (default: 1000000).",
}
