"""Root conftest: shared test configuration."""

import os

# Never reach a real database or push service from tests
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("NOTIFICATIONS_ENABLED", "false")
os.environ.setdefault("LOG_FORMAT", "text")
