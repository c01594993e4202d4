"""
Root pytest configuration.

Database paths are redirected into a temporary directory before any
project module is imported, so the config service, the logger singleton
and the stores never touch the real databases.
"""
import os
import tempfile
from pathlib import Path

_TMP = Path(tempfile.mkdtemp(prefix="safetyforms-tests-"))

os.environ.setdefault("SAFETYFORMS_DATABASE__APP_DATA", str(_TMP / "app.db"))
os.environ.setdefault("SAFETYFORMS_DATABASE__LOCAL_CACHE", str(_TMP / "cache.db"))
os.environ.setdefault("SAFETYFORMS_DATABASE__LOGGING", str(_TMP / "logs.db"))
os.environ.setdefault("SAFETYFORMS_STORAGE__THREADED_SYNC", "false")
