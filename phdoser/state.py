"""Shared controller state, calibration tables and cooldown timers."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

_CLOCK_MODULUS = 1 << 32

PH_VALUES: tuple[float, ...] = (
    7.4, 7.3, 7.2, 7.1,
    7.0, 6.9, 6.8, 6.7, 6.6,
    6.5, 6.4, 6.3, 6.2, 6.1,
    6.0, 5.9, 5.8, 5.7, 5.6,
    5.5, 5.4, 5.3, 5.2, 5.1,
    5.0, 4.9, 4.8, 4.7, 4.6,
    4.5,
)

# ADC reading that corresponds to each entry of PH_VALUES.
CLUSTER_CENTERS: tuple[int, ...] = (
    593, 597, 601, 605, 609,
    613, 617, 621, 625, 629,
    633, 637, 641, 645, 649,
    652, 655, 659, 661, 665,
    669, 673, 677, 681, 685,
    689, 693, 697, 701, 705,
)

# Pump seconds per pH band, highest band first.
PH_SETTER_TABLE: tuple[int, ...] = (8, 4, 2, 1, 0)

CALIBRATION_SLOTS = 31
ADC_SLOTS = 20
CALIBRATION_HISTORY = 1024
MED_MEDIAN_SLOTS = 60
TRIM_MEAN_MEDIAN_SLOTS = 36


class Mode(str, enum.Enum):
    """What the main loop does on each pass."""

    DOSER = "Doser"
    CALIBRATOR = "Calibrator"


class Phase(str, enum.Enum):
    """Whether the doser is only watching or actively lowering pH."""

    WATCHING = "Watching"
    LOWERING = "Lowering"


@dataclass
class Cooldown:
    """A period measured on a 32-bit millisecond clock that wraps around."""

    period: int
    last: int = 0

    def elapsed(self, now: int) -> int:
        """Milliseconds since the last restart, modulo the clock width."""
        return (now - self.last) % _CLOCK_MODULUS

    def ready(self, now: int) -> bool:
        """True once the period has passed since the last restart."""
        return self.elapsed(now) >= self.period

    def restart(self, now: int) -> None:
        """Start a new period at ``now``."""
        self.last = now

    def remaining(self, now: int) -> int:
        """Milliseconds left in the current period, never negative."""
        elapsed = self.elapsed(now)
        return self.period - elapsed if elapsed < self.period else 0


def _zeros(count: int) -> list[int]:
    return [0] * count


@dataclass
class DoserState:
    """Everything the doser and calibrator read and update between passes."""

    mode: Mode = Mode.DOSER
    phase: Phase = Phase.WATCHING

    current_ph: float = 0.0
    highest: int = 0
    min_ph: float = 5.6
    max_ph: float = 6.4

    min_adc: int = 300
    max_adc: int = 900

    ph_values: tuple[float, ...] = PH_VALUES
    cluster_centers: tuple[int, ...] = CLUSTER_CENTERS
    clustered: list[int] = field(default_factory=lambda: _zeros(len(CLUSTER_CENTERS)))
    comp_clustered: list[int] = field(default_factory=lambda: _zeros(len(CLUSTER_CENTERS)))
    clustered_limit: int = 36
    decay_factor: float = 0.95

    ph_setter_table: tuple[int, ...] = PH_SETTER_TABLE
    tester_multiplier: float = 0.36

    sample_count: int = 360
    median_count: int = 100
    med_medians: list[int] = field(default_factory=lambda: _zeros(MED_MEDIAN_SLOTS))
    comp_med_medians: list[int] = field(default_factory=lambda: _zeros(MED_MEDIAN_SLOTS))
    med_median_index: int = 0

    trim_mean_count: int = 36
    trim_fraction: float = 0.25
    trim_mean_std: float = 0.0
    std_limit: float = 1.5
    trim_fraction_median: float = 0.15
    trim_mean_medians: list[int] = field(
        default_factory=lambda: _zeros(TRIM_MEAN_MEDIAN_SLOTS)
    )
    trim_mean_median_index: int = 0
    trimmed_mean_median: int = 0

    print_iteration: int = 0

    calibration_screen: bool = False
    calibration_values: list[int] = field(default_factory=lambda: _zeros(CALIBRATION_SLOTS))
    calibration_std_devs: list[float] = field(
        default_factory=lambda: [0.0] * CALIBRATION_SLOTS
    )
    ph_index: int = 0
    titter: Cooldown = field(default_factory=lambda: Cooldown(3 * 60 * 1000))
    tit_time: int = 10 * 1000
    total_tit_time: int = 0

    enough_samples: bool = False
    adc_values: list[int] = field(default_factory=lambda: _zeros(ADC_SLOTS))
    adc_occurrences: list[int] = field(default_factory=lambda: _zeros(ADC_SLOTS))
    med_values: list[int] = field(default_factory=lambda: _zeros(ADC_SLOTS))
    med_occurrences: list[int] = field(default_factory=lambda: _zeros(ADC_SLOTS))
    med_comp_values: list[int] = field(default_factory=lambda: _zeros(ADC_SLOTS))
    med_occ_comp: list[int] = field(default_factory=lambda: _zeros(ADC_SLOTS))

    trim_mean_history: list[int] = field(default_factory=lambda: _zeros(CALIBRATION_HISTORY))
    trim_mean_history_index: int = 0
    median_std: float = 0.0
    calib_median: int = 0
    trim_mean: float = 0.0
    calib_decay: Cooldown = field(default_factory=lambda: Cooldown(3 * 60 * 1000, last=60))
    calib_decay_factor: float = 0.80

    loop_timer: Cooldown = field(default_factory=lambda: Cooldown(0))
    phase_timer: Cooldown = field(default_factory=lambda: Cooldown(0))
    setter_timer: Cooldown = field(default_factory=lambda: Cooldown(0))
    printer_timer: Cooldown = field(default_factory=lambda: Cooldown(0))
    decay_timer: Cooldown = field(default_factory=lambda: Cooldown(0))
    comp_timer: Cooldown = field(default_factory=lambda: Cooldown(0))

    def reset_calibration(self) -> None:
        """Forget the running calibration statistics."""
        self.enough_samples = False
        self.median_std = 0.0
        self.calib_median = 0