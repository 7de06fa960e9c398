"""ORM models package."""
from .alert import Alert, AlertSeverity
from .alert_configuration import AlertConfiguration, AlertType, NotificationChannel, ThresholdOperator
from .api_key import ApiKey, ApiScope
from .audit import AuditLog
from .base import Base
from .dam import Dam, DamCapacity, DamStatus
from .groundwater import GroundwaterDepth, GroundwaterWell
from .notification import Notification, NotificationStatus
from .rainfall import RainfallData, RainfallStation
from .river import RiverLevel, RiverLevelStatus, Station
from .scheduler_lock import SchedulerLock
from .user import User

__all__ = [
    "Alert",
    "AlertConfiguration",
    "AlertSeverity",
    "AlertType",
    "ApiKey",
    "ApiScope",
    "AuditLog",
    "Base",
    "Dam",
    "DamCapacity",
    "DamStatus",
    "GroundwaterDepth",
    "GroundwaterWell",
    "Notification",
    "NotificationChannel",
    "NotificationStatus",
    "RainfallData",
    "RainfallStation",
    "RiverLevel",
    "RiverLevelStatus",
    "SchedulerLock",
    "Station",
    "ThresholdOperator",
    "User",
]
