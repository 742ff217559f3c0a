import re
import time

_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_COMPONENT = r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)"
_DURATION_RE = re.compile(rf"([+-]?)((?:{_COMPONENT})+)")
_COMPONENT_RE = re.compile(_COMPONENT)


def parse_duration(text: str) -> float:
    """Convert a Go-style duration string ("1m30s", "250ms") to seconds"""
    if text in ("0", "+0", "-0"):
        return 0.0
    match = _DURATION_RE.fullmatch(text)
    if not match:
        raise ValueError(f"invalid duration {text!r}")
    seconds = sum(
        float(number) * _UNITS[unit] for number, unit in _COMPONENT_RE.findall(match[2])
    )
    return -seconds if match[1] == "-" else seconds


def timestamp_now() -> int:
    """Current Unix timestamp in whole seconds"""
    return int(time.time())
