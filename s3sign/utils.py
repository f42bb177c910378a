import re
import time
from math import floor
from typing import Optional


_units = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,  # micro sign
    "μs": 1e-6,  # greek small letter mu
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_term = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)")

def parse_duration(text: str) -> float:
    """Parse a duration such as '1h', '90m', '1h30m' or '1.5h' into seconds. A bare number is taken as seconds."""
    text = text.strip()
    sign = 1.0
    if text[:1] in ("-", "+"):
        sign = -1.0 if "-" == text[0] else 1.0
        text = text[1:]
    if not text:
        raise ValueError("Empty duration")
    if re.fullmatch(r"\d+\.?\d*|\.\d+", text):
        return sign * float(text)
    seconds = 0.0
    pos = 0
    for match in _term.finditer(text):
        if match.start() != pos:
            break
        seconds += float(match.group(1)) * _units[match.group(2)]
        pos = match.end()
    if pos != len(text):
        raise ValueError(f"Invalid duration '{text}'")
    return sign * seconds

def expires_at(duration: float, now: Optional[float]=None) -> int:
    """Unix timestamp 'duration' seconds from 'now'."""
    if now is None:
        now = time.time()
    return floor(now + duration)
