"""Global pytest configuration."""

import os

# Environment defaults for tests, set before any app imports
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production-use-0123")
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "4")
