"""Fixed-width text reports of the doser and calibrator state."""

from __future__ import annotations

import math

from phdoser.state import DoserState, Mode, Phase

_VERSION = "V0.0.8"
_BANNER = "|/|=B=E=G=I=N=N=I=N=G=B=E=G=I=N=N=I=N=G=B=E=G=I=N=N=I=N=G=B=|/|"
_RULE = "|/|---------------------------------------------------------|/|"
_DOUBLE_RULE = "|/|=========================================================|/|"
_CLUSTER_HEADER = "|/|===PH===ClUSTER==SAMPLES=================================|/|"
_ADC_HEADER = "|/|=MEDADC==SAMPLES==MEDMEDADC==SAMPLES=====================|/|"
_CALIBRATION_HEADER = "|/|==PH======CLUSTERCENTER===STDDEV=========================|/|"
_END = "|/|==========================END============================|/|"

_REPORT_LINES: dict[Mode, tuple[int, ...]] = {
    Mode.DOSER: (0, 1, 2),
    Mode.CALIBRATOR: (0, 602, 604, 603, 999),
}


def pad_int(value: int, width: int) -> str:
    """``value`` followed by spaces up to ``width`` characters."""
    return str(value).ljust(width)


def fixed_float(value: float, precision: int, width: int) -> str:
    """``value`` with ``precision`` decimals, padded for up to three integer digits."""
    if math.isnan(value):
        text = "nan"
    elif math.isinf(value):
        text = "inf"
    else:
        text = f"{value:.{precision}f}"
    magnitude = abs(value)
    length = 1 if value < 0 else 0
    if magnitude < 10:
        length += 1
    elif magnitude < 100:
        length += 2
    else:
        length += 3
    length += 1 + precision
    return text + " " * max(width - length, 0)


def pad_text(text: str, width: int) -> str:
    """``text`` followed by spaces up to ``width`` characters."""
    return text.ljust(width)


def _two_decimals(value: float) -> str:
    return f"{value:.2f}"


def _status(state: DoserState, now: int) -> str:
    pump = getattr(state, "pump", None)
    parts = [
        _BANNER, "\n",
        "|/| ", _VERSION, " | ",
        "prntNr: ", pad_int(state.print_iteration, 4), " | ",
        "Mode: ", state.mode.value, " | ",
        "phase: ", pad_text(state.phase.value, 10), " |/|\n",
        _RULE, "\n",
        "|/| PH: ", _two_decimals(state.current_ph), " | ",
    ]
    remaining = 0
    if state.mode is Mode.DOSER:
        if state.phase is Phase.WATCHING:
            parts.append("SetterCD: ")
            remaining = state.setter_timer.remaining(now)
        elif state.phase is Phase.LOWERING:
            parts.append("PumperCD: ")
            remaining = pump.cooldown.remaining(now) if pump is not None else 0
    parts.append(pad_int(remaining // 1000, 4))
    parts.append(" | ")
    if state.mode is Mode.DOSER:
        runtime = pump.runtime_ms if pump is not None else 0
        parts += ["PumpTime: ", pad_int(runtime, 4), "(ms)", "          |/| "]
    parts.append("\n")
    return "".join(parts)


def _cluster_table(state: DoserState) -> str:
    rows = []
    for ph, center, sample in zip(state.ph_values, state.cluster_centers, state.clustered):
        sample_text = str(sample)
        filler = " " * max(5 - len(sample_text), 0)
        if state.current_ph == ph:
            body = f"->{_two_decimals(ph)}<-|->{center}<-|->{sample_text}<-{filler}"
        else:
            body = f"  {_two_decimals(ph)}  |  {center}  |  {sample_text}{filler}  "
        rows.append(f"|/|{body}|/|\n")
    return "".join(rows)


def _adc_table(state: DoserState) -> str:
    rows = []
    for value, occurrences in zip(state.adc_values, state.adc_occurrences):
        if value == 0:
            continue
        row = ["|/| ", pad_int(value, 6), " | ", pad_int(occurrences, 6)]
        matched = False
        for med_value, med_occurrences in zip(state.med_values, state.med_occurrences):
            if med_value != 0 and med_value == value:
                row += [" | ", pad_int(med_value, 6), " |   ", pad_int(med_occurrences, 6)]
                matched = True
        if not matched:
            row += [" | ", pad_int(value, 6), " |   ", "0 (x) "]
        row.append(" |/|\n")
        rows.append("".join(row))
    return "".join(rows)


def _calibration_summary(state: DoserState) -> str:
    readiness = pad_text("(READY)", 5) if state.enough_samples else pad_text("(WAIT)", 7)
    return "".join([
        _DOUBLE_RULE, "\n",
        "|/| STDDev: ", fixed_float(state.median_std, 2, 4), " | ",
        "trimMeanMedi: ", fixed_float(state.calib_median, 2, 6), " | ",
        "(", pad_int(state.trim_mean_history_index, 3), "/",
        str(len(state.trim_mean_history)), ")",
        readiness, " |/|\n",
    ])


def _calibration_table(state: DoserState) -> str:
    rows = [_CALIBRATION_HEADER, "\n"]
    for ph, center, deviation in zip(
        state.ph_values, state.calibration_values, state.calibration_std_devs
    ):
        rows.append(
            f"|/| {fixed_float(ph, 2, 6)} |     {fixed_float(center, 2, 6)}"
            f"     | {fixed_float(deviation, 2, 6)} |/|\n"
        )
    return "".join(rows)


def _titration(state: DoserState, now: int) -> str:
    remaining = state.titter.remaining(now)
    return "".join([
        _DOUBLE_RULE, "\n",
        "|/| titTime(ms): ", pad_int(state.tit_time, 4), " | ",
        "TitCD: ", pad_int(remaining // 1000, 4), " | ",
        "totalTitTime: ", pad_int(state.total_tit_time, 7), " |/|\n",
    ])


def render_line(state: DoserState, now: int, line: int) -> str:
    """Text of one numbered report section; unknown sections are empty.

    Pump timing is taken from ``state.pump`` when the state carries one.
    """
    if line == 0:
        return _status(state, now)
    if line == 1:
        return _CLUSTER_HEADER + "\n"
    if line == 2:
        return _cluster_table(state)
    if line == 600:
        return _ADC_HEADER + "\n"
    if line == 601:
        return _adc_table(state)
    if line == 602:
        return _calibration_summary(state)
    if line == 603:
        return _calibration_table(state)
    if line == 604:
        return _titration(state, now)
    if line == 999:
        return _END + "\n"
    return ""


def render_report(state: DoserState, now: int) -> str | None:
    """The report for the current mode once the printer period is due, else None."""
    if not state.printer_timer.ready(now):
        return None
    state.printer_timer.restart(now)
    text = "".join(
        render_line(state, now, line) for line in _REPORT_LINES.get(state.mode, ())
    )
    state.print_iteration += 1
    return text