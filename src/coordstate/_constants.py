"""Internal constants shared across the library."""

FRAMEWORK_ID_KEY = "frameworkId"
FRAMEWORK_ID_ERROR = "Could not retrieve framework ID"

DEFAULT_BASE_URL = "http://127.0.0.1:8500"
DEFAULT_ROOT = "coordstate"
DEFAULT_TIMEOUT_S = 10.0

PATH_SEPARATOR = "/"
ROOT_PATH = "/"

# Consul KV HTTP API
CONSUL_KV_PREFIX = "/v1/kv/"
CONSUL_TOKEN_HEADER = "X-Consul-Token"
