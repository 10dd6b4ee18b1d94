# Test environment defaults; must run before anything imports transcription_api.
from __future__ import annotations

import os
import tempfile

# Use an in-memory SQLite DB during tests unless overridden
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("DB_ECHO", "0")
# Keep test runs from writing log files into the working tree
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="transcription-api-logs-"))
