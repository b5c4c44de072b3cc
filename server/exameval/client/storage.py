"""
Persistent key/value store standing in for browser local storage.

Values are strings, as in local storage; callers serialize their own JSON.
Failures are logged and reported as absent state rather than raised.
"""
import logging
import os
import sqlite3
from typing import Optional

logger = logging.getLogger(__name__)


class LocalStorage:
    def __init__(self, db_path: str = "exameval_client.db"):
        self.db_path = db_path if db_path == ":memory:" else os.path.abspath(db_path)
        self.conn = None

    def init(self):
        """Open the database and create the table"""
        if self.db_path != ":memory:":
            os.makedirs(os.path.dirname(self.db_path), exist_ok=True)
        self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS local_storage (
                key TEXT PRIMARY KEY,
                value TEXT
            )
        """)
        self.conn.commit()
        logger.debug("Local storage ready: %s", self.db_path)

    def get_item(self, key: str) -> Optional[str]:
        if not self.conn:
            self.init()
        try:
            row = self.conn.execute("SELECT value FROM local_storage WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as e:
            logger.warning("Could not read %s from local storage: %s", key, e)
            return None
        return row[0] if row else None

    def set_item(self, key: str, value: str) -> bool:
        """Returns False when the write failed (quota, locked file...)"""
        if not self.conn:
            self.init()
        try:
            self.conn.execute("INSERT OR REPLACE INTO local_storage (key, value) VALUES (?, ?)", (key, value))
            self.conn.commit()
        except sqlite3.Error as e:
            logger.warning("Could not write %s to local storage: %s", key, e)
            return False
        return True

    def remove_item(self, key: str) -> None:
        if not self.conn:
            self.init()
        try:
            self.conn.execute("DELETE FROM local_storage WHERE key = ?", (key,))
            self.conn.commit()
        except sqlite3.Error as e:
            logger.warning("Could not remove %s from local storage: %s", key, e)

    def close(self):
        if self.conn:
            self.conn.close()
            self.conn = None
