__all__ = ["AuthContainer", "BootConfiguration", "CampusLiveContainer", "RealtimeContainer"]


from .auth import AuthContainer
from .campuslive import BootConfiguration, CampusLiveContainer
from .realtime import RealtimeContainer
