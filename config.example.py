# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "SALES_APP_NAME": "App display name (default: sales-tracker).",
    "SALES_LOG_LEVEL": "Console logging level (default: INFO).",
    "SALES_DATA_DIR": "Local data directory for logs (default: .local/sales).",
    # Initial load
    "SALES_TASKS_SOURCE": "Path or http(s) URL of the tasks JSON array (default: tasks.json).",
    "SALES_FETCH_TIMEOUT_SECONDS": "HTTP timeout for the initial fetch (default: 10).",
    "SALES_SEED_TASK_COUNT": "Synthetic tasks generated when the payload has none (default: 50).",
    "SALES_SEED_ON_FAILURE": "Also seed synthetic tasks when the load fails (true/false).",
    # Metrics
    "SALES_HIGH_VALUE_ROI": "ROI at or above which a task is flagged high value (default: 200).",
    # Connectors
    "SALES_CONSOLE_ENABLED": "Run the console REPL; otherwise print metrics and exit (true/false).",
}
