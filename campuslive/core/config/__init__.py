__all__ = [
    "AuthSecrets",
    "AuthSettings",
    "LoggingSettings",
    "RealtimeSettings",
    "RedisSettings",
    "Secrets",
    "ServeSettings",
    "Settings",
    "StorageSettings",
    "WebSettings",
]


from .auth import AuthSettings
from .logging import LoggingSettings
from .realtime import RealtimeSettings
from .secrets import AuthSecrets, Secrets
from .settings import Settings
from .storage import RedisSettings, StorageSettings
from .web import ServeSettings, WebSettings
