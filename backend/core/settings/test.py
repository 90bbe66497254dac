from .base import *  # noqa: F401,F403

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

# Redis is replaced with mocks in the tests that need it.
CHAT_RATE_LIMIT_ENABLED = False

# Background sweep tasks would outlive each test's event loop.
ROOM_SWEEP_INTERVAL_SECONDS = None

LOGGING["root"]["level"] = "WARNING"  # noqa: F405
