"""Persistent storage: SQLite key-value settings.

The motility store only needs get_setting/set_setting; Database persists to
disk, MemorySettings keeps values for the lifetime of the process.
"""

from storage.database import Database, MemorySettings, get_db
