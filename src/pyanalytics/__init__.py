"""pyanalytics - analytics context collection and payload building."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyanalytics")
except PackageNotFoundError:
    __version__ = "0+local"
from pyanalytics._dispatch import Dispatcher, LoggingDispatcher
from pyanalytics.advertising import AdvertisingIdProvider, AdvertisingInfo, detect_advertising_provider
from pyanalytics.client import AnalyticsClient
from pyanalytics.config import AnalyticsConfig, DeviceProfile
from pyanalytics.context.store import AnalyticsContext
from pyanalytics.exceptions import (
    AnalyticsConfigError,
    AnalyticsError,
    PayloadBuilderStateError,
    PayloadValidationError,
    SettingsStoreError,
)
from pyanalytics.models import (
    Campaign,
    Device,
    IdentifyPayload,
    IdentifyPayloadBuilder,
    ItemTarget,
    ItemTargetBuilder,
    Location,
    PayloadType,
    Referrer,
    TrackPayload,
    TrackPayloadBuilder,
    Traits,
)
from pyanalytics.probe import EnvironmentProbe, HostProbe, ProfileProbe, ScreenMetrics
from pyanalytics.settings import JsonFileSettingsStore, LoginSettings, SettingsStore

__all__ = [
    "__version__",
    "AdvertisingIdProvider",
    "AdvertisingInfo",
    "AnalyticsClient",
    "AnalyticsConfig",
    "AnalyticsConfigError",
    "AnalyticsContext",
    "AnalyticsError",
    "Campaign",
    "Device",
    "DeviceProfile",
    "Dispatcher",
    "EnvironmentProbe",
    "HostProbe",
    "IdentifyPayload",
    "IdentifyPayloadBuilder",
    "ItemTarget",
    "ItemTargetBuilder",
    "JsonFileSettingsStore",
    "Location",
    "LoggingDispatcher",
    "LoginSettings",
    "PayloadBuilderStateError",
    "PayloadType",
    "PayloadValidationError",
    "ProfileProbe",
    "Referrer",
    "ScreenMetrics",
    "SettingsStore",
    "TrackPayload",
    "TrackPayloadBuilder",
    "Traits",
    "detect_advertising_provider",
]
