import os

CUSTOM_METRIC_DOMAIN = "custom.googleapis.com"

PROJECT = os.getenv("GMONITOR_PROJECT")
METRIC_DOMAIN = os.getenv("GMONITOR_METRIC_DOMAIN", CUSTOM_METRIC_DOMAIN)

# Seconds points accumulate before a batch is sent. 0 disables batching.
DEFAULT_THROTTLE_SEC = float(os.getenv("GMONITOR_DEFAULT_THROTTLE_SEC", "0"))

API_BASE_URL = os.getenv("GMONITOR_API_BASE_URL", "https://monitoring.googleapis.com/v3")
REQUEST_TIMEOUT_SEC = float(os.getenv("GMONITOR_REQUEST_TIMEOUT_SEC", "20"))

MONITORING_SCOPES = [
    "https://www.googleapis.com/auth/cloud-platform",
    "https://www.googleapis.com/auth/monitoring",
    "https://www.googleapis.com/auth/monitoring.read",
    "https://www.googleapis.com/auth/monitoring.write",
]
