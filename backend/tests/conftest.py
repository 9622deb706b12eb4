"""Root conftest: shared test configuration."""

import os

# Ensure tests never reach for a real Redis by service name
os.environ.setdefault("REDIS_HOST", "localhost")
os.environ.setdefault("LOG_FORMAT", "text")
