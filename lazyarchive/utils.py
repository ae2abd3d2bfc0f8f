from pathlib import Path
from datetime import timedelta
import re

from .errors import InvalidPathError

_UNIT_MICROSECONDS = {
    "ns": 0.001,
    "us": 1, "µs": 1, "μs": 1,
    "ms": 1_000,
    "s": 1_000_000,
    "m": 60 * 1_000_000,
    "h": 3600 * 1_000_000,
}
_COMPONENT = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as '300ms', '1.5h' or '2h45m'.

    Every number needs a unit, except a bare '0'.
    """
    s = text.strip()
    sign = 1
    if s[:1] in ("+", "-"):
        sign = -1 if s[0] == "-" else 1
        s = s[1:]
    if s == "0":
        return timedelta(0)
    if not s:
        raise ValueError(f"invalid duration: {text!r}")

    total = 0.0
    pos = 0
    while pos < len(s):
        m = _COMPONENT.match(s, pos)
        if not m:
            raise ValueError(f"invalid duration: {text!r}")
        total += float(m.group(1)) * _UNIT_MICROSECONDS[m.group(2)]
        pos = m.end()
    return timedelta(microseconds=sign * total)


def _trim(value: float) -> str:
    return f"{value:.6f}".rstrip("0").rstrip(".")


def format_duration(td: timedelta) -> str:
    """Inverse of parse_duration, e.g. '5m0s', '1h0m0s', '300ms'."""
    us = td // timedelta(microseconds=1)
    if us == 0:
        return "0s"
    sign = "-" if us < 0 else ""
    us = abs(us)
    if us < 1_000:
        return f"{sign}{us}µs"
    if us < 1_000_000:
        return f"{sign}{_trim(us / 1_000)}ms"

    hours, rest = divmod(us, 3600 * 1_000_000)
    minutes, rest = divmod(rest, 60 * 1_000_000)
    out = sign
    if hours:
        out += f"{hours}h"
    if hours or minutes:
        out += f"{minutes}m"
    return out + f"{_trim(rest / 1_000_000)}s"


def validate_source_dest(src: Path, dest: Path) -> None:
    if not src.exists() or not src.is_dir():
        raise InvalidPathError(f"Source folder invalid: {src}")
    if dest.exists() and not dest.is_dir():
        raise InvalidPathError(f"Destination folder invalid: {dest}")
    src_resolved = src.resolve()
    dest_resolved = dest.resolve()
    if src_resolved == dest_resolved:
        raise InvalidPathError("Source and destination are the same folder.")
    # Moving into a subfolder of the source would move files forever.
    if src_resolved in dest_resolved.parents:
        raise InvalidPathError("Destination cannot be inside source folder.")
