import os

__all__ = [
    "GQLWS_CONNECT_TIMEOUT",
    "GQLWS_DEBUG",
    "GQLWS_IO_TIMEOUT",
    "GQLWS_LOG_CORRELATION_ENABLED",
    "GQLWS_LOG_FORMAT",
    "GQLWS_LOG_HUMAN_OUTPUT",
    "GQLWS_LOG_JSON_FILE",
    "GQLWS_PERF_THRESHOLD_MS",
    "GQLWS_PERF_TRACKING",
    "NORMAL_CLOSURE",
    "PROTOCOL",
    "UNKNOWN",
    "YES_ANSWER",
]

YES_ANSWER = ("true", "1", "yes", "y", "t", 1, "on", "o")

# WebSocket sub-protocol requested during the handshake
PROTOCOL: str = "graphql-transport-ws"
# Event name for frames the codec could not decode
UNKNOWN: str = "unknown"
NORMAL_CLOSURE: int = 1000

GQLWS_DEBUG = os.environ.get("GQLWS_DEBUG", "0").casefold() in YES_ANSWER

# Logging configuration
GQLWS_LOG_FORMAT: str = os.environ.get("GQLWS_LOG_FORMAT", "human").casefold()
_json_file = os.environ.get("GQLWS_LOG_JSON_FILE")
GQLWS_LOG_JSON_FILE: str | None = _json_file if _json_file else None
GQLWS_LOG_HUMAN_OUTPUT: str = os.environ.get("GQLWS_LOG_HUMAN_OUTPUT", "stderr")
GQLWS_LOG_CORRELATION_ENABLED: bool = (
    os.environ.get("GQLWS_LOG_CORRELATION_ENABLED", "true").casefold() in YES_ANSWER
)

# Performance instrumentation
GQLWS_PERF_TRACKING: bool = os.environ.get("GQLWS_PERF_TRACKING", "0").casefold() in YES_ANSWER
_perf_threshold = os.environ.get("GQLWS_PERF_THRESHOLD_MS", "100")
try:
    _perf_threshold_value: int = int(_perf_threshold) if _perf_threshold else 100
except ValueError:
    _perf_threshold_value = 100
GQLWS_PERF_THRESHOLD_MS: int = _perf_threshold_value

# Transport timeouts (seconds)
_connect_timeout = os.environ.get("GQLWS_CONNECT_TIMEOUT", "10.0")
try:
    _connect_timeout_value: float = float(_connect_timeout) if _connect_timeout else 10.0
except ValueError:
    _connect_timeout_value = 10.0
GQLWS_CONNECT_TIMEOUT: float = _connect_timeout_value

_io_timeout = os.environ.get("GQLWS_IO_TIMEOUT", "5.0")
try:
    _io_timeout_value: float = float(_io_timeout) if _io_timeout else 5.0
except ValueError:
    _io_timeout_value = 5.0
GQLWS_IO_TIMEOUT: float = _io_timeout_value
