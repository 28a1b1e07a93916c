"""Reserved key names shared with the receiving analytics backend.

The values here form the wire contract and must not change.
"""

UNDEFINED = "undefined"
UNKNOWN_CARRIER = "unknown"

# Top-level context keys
APP_BUILD_KEY = "build"
CAMPAIGN_KEY = "campaign"
DEVICE_KEY = "device"
LOCALE_KEY = "locale"
LOCATION_KEY = "location"
NETWORK_BLUETOOTH_KEY = "network_bluetooth"
NETWORK_CARRIER_KEY = "network_carrier"
NETWORK_CELLULAR_KEY = "network_cellular"
OS_VERSION_KEY = "os_version"
REFERRER_KEY = "referrer"
SCREEN_DENSITY_KEY = "screen_density"
SCREEN_HEIGHT_KEY = "screen_height"
SCREEN_WIDTH_KEY = "screen_width"
TIMEZONE_KEY = "timezone"
TRAITS_KEY = "traits"
USER_AGENT_KEY = "userAgent"

# Device sub-object
DEVICE_ID_KEY = "device_id"
DEVICE_MANUFACTURER_KEY = "deviceBrand"
DEVICE_NAME_KEY = "deviceName"
DEVICE_TOKEN_KEY = "token"
DEVICE_ADVERTISING_ID_KEY = "advertisingId"
DEVICE_AD_TRACKING_ENABLED_KEY = "adTrackingEnabled"

# Payload keys
EVENT_KEY = "event"
PROPERTIES_KEY = "properties"
TARGET_KEY = "target"

#: Entry-point group scanned for an installed advertising-id provider.
ADVERTISING_ID_ENTRY_POINT_GROUP = "pyanalytics.advertising_id"

DEFAULT_LOGIN_EMAIL_KEY = "login_email"
