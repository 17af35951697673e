"""Global pytest configuration."""

import os

# In-memory store and default thresholds for tests, set before any imports
os.environ.setdefault("DATABASE_URL", "")
os.environ.setdefault("LOG_LEVEL", "WARNING")
