__all__ = [
    "BootConfiguration",
    "di",
    "CampusLiveContainer",
    "LoggingProvider",
    "Settings",
    "Secrets",
    "TimestampProvider",
]


from . import di
from .config import Secrets, Settings
from .container import BootConfiguration, CampusLiveContainer
from .provider import LoggingProvider, TimestampProvider
