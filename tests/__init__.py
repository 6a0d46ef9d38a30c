"""Test package. Pins settings to an in-memory database before app modules are imported."""

import os

os.environ.setdefault("APP_ENV", "dev")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret-key-with-at-least-32-bytes!!")
