# tool_state_sync/config.py
from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()

# Idle window before a free-text edit is committed to history
DEFAULT_DEBOUNCE_MS = int(os.getenv("TOOL_STATE_DEBOUNCE_MS", "1000"))

# Serialized fields larger than this are kept out of the address bar
OVERSIZE_THRESHOLD_BYTES = int(os.getenv("TOOL_STATE_OVERSIZE_BYTES", "2048"))

RECENT_TOOLS_LIMIT = int(os.getenv("TOOL_STATE_RECENT_LIMIT", "10"))

PREVIEW_MAX_LENGTH = 100

# Unset means history lives in an in-memory store for the process lifetime
DEFAULT_DB_PATH = os.getenv("TOOL_STATE_DB_PATH") or None
