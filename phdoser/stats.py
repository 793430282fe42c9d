"""Statistics used to turn raw ADC readings into stable pH estimates."""

from __future__ import annotations

import bisect
import math
from collections.abc import MutableSequence, Sequence

_PRUNE_THRESHOLD = 66


def _trunc_div(numerator: int, denominator: int) -> int:
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator > 0) else -quotient


def median(values: Sequence[int]) -> int:
    """Integer median; the two middle values are averaged toward zero."""
    ordered = sorted(values)
    size = len(ordered)
    if size == 0:
        return 0
    middle = size // 2
    if size % 2:
        return ordered[middle]
    return _trunc_div(ordered[middle - 1] + ordered[middle], 2)


def std_dev(values: Sequence[float]) -> float:
    """Sample standard deviation; 0.0 for no values, NaN for a single one."""
    size = len(values)
    if size == 0:
        return 0.0
    if size == 1:
        return math.nan
    mean = sum(values) / size
    square_sum = sum((value - mean) ** 2 for value in values)
    return math.sqrt(square_sum / (size - 1))


def trimmed_mean(values: Sequence[float], trim_fraction: float) -> float:
    """Mean after dropping ``trim_fraction`` of the values from each end."""
    ordered = sorted(values)
    trim = int(len(ordered) * trim_fraction)
    kept = ordered[trim:len(ordered) - trim]
    if not kept:
        raise ValueError("no values left after trimming")
    return sum(kept) / len(kept)


def sort_by_value(
    values: Sequence[int], occurrences: Sequence[int]
) -> tuple[list[int], list[int]]:
    """Sort values ascending, carrying each value's occurrence count along."""
    if len(values) != len(occurrences):
        raise ValueError("values and occurrences differ in length")
    pairs = sorted(zip(values, occurrences), key=lambda pair: pair[0])
    return [value for value, _ in pairs], [count for _, count in pairs]


def cluster(
    centers: Sequence[int], sample: int, counts: MutableSequence[int]
) -> list[int]:
    """Count ``sample`` against its nearest center(s) in ``counts``.

    ``centers`` must be ascending. Every neighbouring center at the minimal
    distance is counted. Returns the indices that were incremented.
    """
    if not centers:
        raise ValueError("no cluster centers")
    low = min(bisect.bisect_left(centers, sample), len(centers) - 1)
    candidates = range(max(low - 1, 0), min(low + 2, len(centers)))
    distances = {index: abs(centers[index] - sample) for index in candidates}
    closest = min(distances.values())
    hits = [index for index, distance in distances.items() if distance == closest]
    for index in hits:
        counts[index] += 1
    return hits


def decay(
    counts: MutableSequence[int],
    reference: Sequence[int],
    factor: float,
    compare: bool,
) -> None:
    """Scale every count by ``factor`` in place, truncating to integers.

    When ``compare`` is set, counts at or below a fixed threshold of 66 are
    dropped first. ``reference`` is the snapshot taken for that comparison;
    the pruning rule does not depend on its contents.
    """
    for index, count in enumerate(counts):
        if compare and count <= _PRUNE_THRESHOLD:
            count = 0
        counts[index] = int(count * factor)


def calib_decay(
    adc_values: MutableSequence[int],
    adc_occurrences: MutableSequence[int],
    med_values: MutableSequence[int],
    med_occurrences: MutableSequence[int],
    med_occ_comp: MutableSequence[int],
    med_comp_values: MutableSequence[int],
    compare: bool,
) -> None:
    """Age the calibration histograms in place.

    Raw ADC counts shrink to 80% and slots that fall to 10 or below are
    cleared; median counts shrink to 95%. With ``compare`` set, a snapshot
    slot whose value is still present and whose count has fallen to 80% of
    the snapshot or less is cleared along with its snapshot.
    """
    for index, count in enumerate(adc_occurrences):
        if count != 0:
            count = int(count * 0.80)
            adc_occurrences[index] = count
            if count <= 10:
                adc_occurrences[index] = 0
                adc_values[index] = 0

    for index, count in enumerate(med_occurrences):
        if count != 0:
            med_occurrences[index] = int(count * 0.95)

    if not compare:
        return
    for index, snapshot_value in enumerate(med_comp_values):
        if snapshot_value == 0 or snapshot_value not in med_values:
            continue
        if med_occ_comp[index] * 0.80 >= med_occurrences[index]:
            med_occurrences[index] = 0
            med_values[index] = 0
            med_occ_comp[index] = 0
            med_comp_values[index] = 0