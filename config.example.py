# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real keys or session files. Use:
- .env (local, gitignored), see .env.example

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "SUPATODO_APP_NAME": "Title shown on the sign-in screen (default: Todo App).",
    "SUPATODO_LOG_LEVEL": "Console logging level (default: WARNING; the log file always gets DEBUG).",
    # Backend Service
    "SUPATODO_SUPABASE_URL": "Project URL (SUPABASE_URL is accepted too). Empty => offline demo backend.",
    "SUPATODO_SUPABASE_ANON_KEY": "Public anon key (SUPABASE_ANON_KEY is accepted too).",
    "SUPATODO_TODOS_TABLE": "Name of the todos table (default: todos).",
    "SUPATODO_HTTP_TIMEOUT_SECONDS": "Per-request timeout; 0 disables local timeouts (default: 0).",
    # Session
    "SUPATODO_PERSIST_SESSION": "Keep the session in session.json across restarts (default: true).",
    "SUPATODO_REFRESH_INTERVAL_SECONDS": "How often the session is checked for expiry (default: 30).",
    "SUPATODO_REFRESH_MARGIN_SECONDS": "Refresh a session this long before it expires (default: 60).",
    # Paths (gitignored)
    "SUPATODO_DATA_DIR": "Local data directory (default: .local/supatodo).",
    "SUPATODO_SESSION_PATH": "Session file path (default: <data_dir>/session.json).",
}
