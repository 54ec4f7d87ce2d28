"""Per-user preferences stored in the user_settings table."""
from sarasva.db import get_connection

DEFAULTS = {"safe_mode": "on"}


def get_setting(db_path: str, user_id: str, key: str, default: str = None) -> str | None:
    conn = get_connection(db_path)
    row = conn.execute(
        "SELECT value FROM user_settings WHERE user_id = ? AND key = ?", (user_id, key)
    ).fetchone()
    conn.close()
    if row:
        return row["value"]
    return default if default is not None else DEFAULTS.get(key)


def set_setting(db_path: str, user_id: str, key: str, value: str) -> None:
    conn = get_connection(db_path)
    conn.execute(
        """INSERT INTO user_settings (user_id, key, value) VALUES (?, ?, ?)
        ON CONFLICT(user_id, key) DO UPDATE SET value=?""",
        (user_id, key, value, value),
    )
    conn.commit()
    conn.close()


def is_safe_mode(db_path: str, user_id: str) -> bool:
    return get_setting(db_path, user_id, "safe_mode") == "on"


def set_safe_mode(db_path: str, user_id: str, enabled: bool) -> None:
    set_setting(db_path, user_id, "safe_mode", "on" if enabled else "off")
