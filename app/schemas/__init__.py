"""Schema package exports."""
from .alert import (
    AlertConfigurationCreate,
    AlertConfigurationRead,
    AlertConfigurationUpdate,
    AlertRead,
    EvaluationResult,
    ReadingEvaluate,
)
from .dam import (
    CurrentCapacityRead,
    DamCapacityCreate,
    DamCapacityIngestResult,
    DamCapacityRead,
    DamCreate,
    DamRead,
    OverflowReadingRead,
)
from .groundwater import (
    CurrentDepthRead,
    DepthCreate,
    DepthIngestResult,
    DepthRead,
    HeatmapPoint,
    RegionalWellRead,
    WellCreate,
    WellRead,
)
from .location import GeoPoint
from .notification import DeliveryReport, NotificationPreferences, NotificationRead, SendTestNotification
from .rainfall import (
    RainfallIngestResult,
    RainfallReadingCreate,
    RainfallReadingRead,
    RainfallStationCreate,
    RainfallStationRead,
    RiskIndicators,
    SeasonalAnalysis,
    SeasonTotals,
)
from .river import (
    CriticalLevelRead,
    CurrentLevelRead,
    RiverLevelCreate,
    RiverLevelIngestResult,
    RiverLevelRead,
    StationCreate,
    StationRead,
)
from .user import UserCreate, UserRead

__all__ = [
    "AlertConfigurationCreate",
    "AlertConfigurationRead",
    "AlertConfigurationUpdate",
    "AlertRead",
    "EvaluationResult",
    "ReadingEvaluate",
    "CurrentCapacityRead",
    "DamCapacityCreate",
    "DamCapacityIngestResult",
    "DamCapacityRead",
    "DamCreate",
    "DamRead",
    "OverflowReadingRead",
    "CurrentDepthRead",
    "DepthCreate",
    "DepthIngestResult",
    "DepthRead",
    "HeatmapPoint",
    "RegionalWellRead",
    "WellCreate",
    "WellRead",
    "GeoPoint",
    "DeliveryReport",
    "NotificationPreferences",
    "NotificationRead",
    "SendTestNotification",
    "RainfallIngestResult",
    "RainfallReadingCreate",
    "RainfallReadingRead",
    "RainfallStationCreate",
    "RainfallStationRead",
    "RiskIndicators",
    "SeasonalAnalysis",
    "SeasonTotals",
    "CriticalLevelRead",
    "CurrentLevelRead",
    "RiverLevelCreate",
    "RiverLevelIngestResult",
    "RiverLevelRead",
    "StationCreate",
    "StationRead",
    "UserCreate",
    "UserRead",
]
