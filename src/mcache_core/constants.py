"""Shared constants for mcache."""

from __future__ import annotations

import re

# TTL applied when a decorator does not name one (milliseconds)
DEFAULT_TTL_MS = 60_000

# One placeholder identifier segment
IDENTIFIER_PATTERN = r"[A-Za-z_][A-Za-z0-9_]*"
IDENTIFIER_RE = re.compile(rf"^{IDENTIFIER_PATTERN}$")

# Whole placeholder body: a.b.c
FIELD_PATH_RE = re.compile(rf"^{IDENTIFIER_PATTERN}(?:\.{IDENTIFIER_PATTERN})*$")

# Environment prefix for Settings
ENV_PREFIX = "MCACHE_"

# Probe key used by `mcache ping`
PING_KEY = "mcache:ping"
PING_TTL_MS = 5_000

# Rendered keys longer than this are shortened in log output
MAX_LOGGED_KEY_LENGTH = 200
