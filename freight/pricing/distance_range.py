"""Distance banding for the rate table.

The table only carries one entry per band, so a raw distance is first
mapped to a key such as ``KM_1_2``, ``KM_51_55`` or ``KM_491_500``.
"""
import re
from typing import Optional, Tuple

MAX_SUPPORTED_KM = 500

# (upper bound of segment, first km of segment, band width)
_SEGMENTS = (
    (50, 1, 2),
    (100, 51, 5),
    (MAX_SUPPORTED_KM, 101, 10),
)

_KEY_PATTERN = re.compile(r"^KM_(\d+)_(\d+)$")


def resolve_key(distance_km: int) -> Optional[str]:
    """Return the band key containing ``distance_km``, or None when unsupported."""
    if distance_km is None or distance_km <= 0:
        return None
    for upper, first, width in _SEGMENTS:
        if distance_km <= upper:
            start = ((distance_km - first) // width) * width + first
            return f"KM_{start}_{start + width - 1}"
    return None


def band_bounds(key: str) -> Tuple[int, int]:
    match = _KEY_PATTERN.match(key or "")
    if not match:
        raise ValueError(f"not a distance range key: {key!r}")
    return int(match.group(1)), int(match.group(2))


def all_keys():
    for upper, first, width in _SEGMENTS:
        for start in range(first, upper + 1, width):
            yield f"KM_{start}_{start + width - 1}"
