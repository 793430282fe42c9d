"""Turning cluster counts into a pH reading and a pump runtime."""

from __future__ import annotations

import struct
from collections.abc import Sequence

from phdoser.state import Phase

# Lower bound of each band and the table entry that band uses; the first
# band is also capped at 7.4.
_BANDS: tuple[tuple[float, int], ...] = (
    (7.0, 0),
    (6.5, 0),
    (6.0, 1),
    (5.8, 2),
    (5.6, 3),
    (5.5, 4),
)
_TOP_OF_RANGE = 7.4


def _as_single(value: float) -> float:
    """Round to single precision, as the stored pH reading is kept."""
    return struct.unpack("f", struct.pack("f", value))[0]


def pick_ph(
    now: int,
    counts: Sequence[int],
    limit: int,
    ph_values: Sequence[float],
    current: float,
) -> tuple[float, int | None]:
    """Choose the pH whose cluster count is highest above a third of ``limit``.

    Returns the new pH and that cluster's count. Before the first second of
    uptime, or when no count clears the threshold, the current pH is kept
    and the count is None.
    """
    if now < 1000:
        return current, None
    best_count = max(limit // 3, 1)
    best_index = None
    for index, count in enumerate(counts):
        if count > best_count:
            best_count = count
            best_index = index
    if best_index is None:
        return current, None
    return ph_values[best_index], counts[best_index]


def select_runtime(ph: float, table: Sequence[int]) -> int | None:
    """Pump runtime in milliseconds for ``ph``, or None outside every band."""
    ph = _as_single(ph)
    upper = _TOP_OF_RANGE
    inclusive = True
    for lower, slot in _BANDS:
        below_upper = ph <= upper if inclusive else ph < upper
        if below_upper and ph >= lower:
            return table[slot] * 1000
        upper = lower
        inclusive = False
    return None


def next_phase(ph: float, min_ph: float, max_ph: float, phase: Phase) -> Phase:
    """Start lowering at or above ``max_ph``; go back to watching at ``min_ph``."""
    if ph >= max_ph:
        return Phase.LOWERING
    if ph <= min_ph:
        return Phase.WATCHING
    return phase