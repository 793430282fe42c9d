"""The main control loop: commands, dosing passes and calibration passes."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Callable
from typing import TextIO

from phdoser.hardware import Pump, read_adc
from phdoser.ph import next_phase, pick_ph, select_runtime
from phdoser.printing import render_report
from phdoser.state import DoserState, Mode, Phase
from phdoser.stats import cluster, decay, std_dev, trimmed_mean

_TIT_STEPS: dict[str, int] = {
    "tit+": 10,
    "tit++": 25,
    "tit+++": 100,
    "tit++++": 200,
    "tit-": -10,
    "tit--": -25,
    "tit---": -100,
    "tit----": -200,
}
_EMPTY_PUMP_MS = 10 * 1000
_CALIBRATION_TRIM = 0.25
_SNAPSHOT_AFTER_MS = 30 * 1000
_IGNORED_COMMANDS = frozenset({"rawanal", "led", "endcalibration"})


class Controller:
    """Runs one pass of the doser or calibrator each time it is ticked."""

    def __init__(
        self,
        sensor: Callable[[], int],
        pump: Pump,
        state: DoserState | None = None,
        output: TextIO | None = None,
    ) -> None:
        self.sensor = sensor
        self.pump = pump
        self.state = state if state is not None else DoserState()
        self.output = output if output is not None else sys.stdout

    def _sample(self, count: int) -> list[int]:
        state = self.state
        return [read_adc(self.sensor, state.min_adc, state.max_adc) for _ in range(count)]

    def _report(self, now: int) -> None:
        text = render_report(self.state, now)
        if text:
            self.output.write(text)

    def handle_command(self, now: int, command: str) -> bool:
        """Apply a case-insensitive command; returns whether it was recognised."""
        state = self.state
        command = command.lower()
        if not command:
            return False
        if command in _TIT_STEPS:
            state.tit_time += _TIT_STEPS[command]
        elif command == "calibrate":
            state.mode = Mode.CALIBRATOR
        elif command == "doser":
            state.mode = Mode.DOSER
        elif command == "log":
            state.calibration_values[state.ph_index] = state.calib_median
            state.calibration_std_devs[state.ph_index] = state.median_std
            state.total_tit_time = 0
            state.ph_index += 1
        elif command == "tittime":
            self.pump.ready = True
            state.titter.restart(now)
            state.reset_calibration()
            self.pump.run_for(state.tit_time)
            state.total_tit_time += state.tit_time
        elif command == "reset":
            state.reset_calibration()
        elif command == "emptypump":
            self.pump.ready = True
            self.pump.run_for(_EMPTY_PUMP_MS)
        elif command == "prev":
            state.ph_index = (
                len(state.calibration_values) - 1 if state.ph_index == 0 else state.ph_index - 1
            )
        elif command == "next":
            state.ph_index = 0 if state.ph_index == len(state.ph_values) - 1 else state.ph_index + 1
        elif command == "calibscreen":
            state.calibration_screen = not state.calibration_screen
        elif command == "result":
            self.output.write(self.result_listing())
        elif command not in _IGNORED_COMMANDS:
            return False
        return True

    def dose(self, now: int) -> None:
        """One dosing pass: sample, cluster, pick the pH and schedule the pump."""
        state = self.state
        means = []
        for _ in range(state.trim_mean_count):
            state.trim_mean = trimmed_mean(self._sample(state.sample_count), state.trim_fraction)
            means.append(int(state.trim_mean))
        state.trim_mean_std = std_dev(means)
        if state.trim_mean_std < state.std_limit:
            state.trimmed_mean_median = int(trimmed_mean(means, state.trim_fraction_median))
            state.trim_mean_medians[state.trim_mean_median_index] = state.trimmed_mean_median
            cluster(state.cluster_centers, state.trimmed_mean_median, state.clustered)
        state.trim_mean_median_index = (state.trim_mean_median_index + 1) % len(
            state.trim_mean_medians
        )

        ph, count = pick_ph(
            now, state.clustered, state.clustered_limit, state.ph_values, state.current_ph
        )
        state.current_ph = ph
        if count is not None:
            state.highest = count

        if state.phase is Phase.LOWERING and state.setter_timer.ready(now):
            state.setter_timer.restart(now)
            self.pump.ready = True
            runtime = select_runtime(state.current_ph, state.ph_setter_table)
            if runtime is not None:
                self.pump.runtime_ms = runtime

        self._report(now)

        if state.decay_timer.ready(now):
            state.decay_timer.restart(now)
            decay(
                state.clustered,
                state.comp_clustered,
                state.decay_factor,
                state.comp_timer.ready(now),
            )
        if state.comp_timer.ready(now):
            state.comp_clustered[:] = state.clustered

    def calibrate(self, now: int) -> None:
        """One calibration pass: record a trimmed mean for the selected pH."""
        state = self.state
        state.current_ph = state.ph_values[state.ph_index]
        state.trim_mean = trimmed_mean(self._sample(state.sample_count), _CALIBRATION_TRIM)
        history = state.trim_mean_history
        history[state.trim_mean_history_index] = int(state.trim_mean)
        if state.enough_samples:
            state.median_std = std_dev(history)
            state.calib_median = int(trimmed_mean(history, _CALIBRATION_TRIM))
        if state.comp_timer.elapsed(now) >= _SNAPSHOT_AFTER_MS:
            state.med_comp_values[:] = state.med_values
            state.med_occ_comp[:] = state.med_occurrences
        state.trim_mean_history_index += 1
        if state.trim_mean_history_index == len(history):
            state.trim_mean_history_index = 0
            state.enough_samples = True
        self._report(now)

    def update_phase(self, now: int) -> None:
        """Switch between watching and lowering according to the current pH."""
        state = self.state
        if state.phase_timer.ready(now):
            state.phase = next_phase(state.current_ph, state.min_ph, state.max_ph, state.phase)

    def tick(self, now: int, command: str | None = None) -> None:
        """One pass of the main loop, with an optional incoming command line."""
        state = self.state
        self.update_phase(now)
        self.pump.update(now, state.phase, state.tester_multiplier)
        command = (command or "").strip()
        if command:
            self.handle_command(now, command)
        if state.loop_timer.ready(now):
            if state.mode is Mode.DOSER:
                self.dose(now)
            elif state.mode is Mode.CALIBRATOR:
                self.calibrate(now)

    def result_listing(self) -> str:
        """Calibrated cluster centers and deviations as paste-ready tables."""
        state = self.state
        blocks = [
            ("int clusterCenters[diffPHVals] = {", [str(v) for v in state.calibration_values]),
            ("int stdDev[diffPHVals] = {", [f"{v:.2f}" for v in state.calibration_std_devs]),
        ]
        lines = []
        for header, values in blocks:
            lines += ["Insertable values", header]
            lines += [
                "".join(f"{value}," for value in values[start:start + 5])
                for start in range(0, len(values), 5)
            ]
            lines.append("};")
        return "\n".join(lines) + "\n"


def main(argv: list[str] | None = None) -> int:
    """Run the controller against a fixed simulated sensor reading."""
    parser = argparse.ArgumentParser(
        prog="phdoser", description="Run the pH doser loop on a simulated sensor."
    )
    parser.add_argument("--adc", type=int, default=621, help="simulated ADC reading")
    parser.add_argument("--passes", type=int, default=1, help="loop passes to run")
    parser.add_argument("--interval", type=int, default=1000, help="milliseconds per pass")
    parser.add_argument(
        "--mode", choices=[mode.value for mode in Mode], default=Mode.DOSER.value
    )
    parser.add_argument(
        "--command", action="append", default=[], help="command to send, one per pass"
    )
    args = parser.parse_args(argv)
    if args.passes < 1:
        parser.error("--passes must be at least 1")
    if args.interval < 0:
        parser.error("--interval must not be negative")

    state = DoserState(mode=Mode(args.mode))
    pump = Pump(lambda on: None, sleep=lambda seconds: None)
    controller = Controller(lambda: args.adc, pump, state)
    commands = list(args.command)
    for index in range(max(args.passes, len(commands))):
        command = commands[index] if index < len(commands) else None
        controller.tick((index + 1) * args.interval, command)
    return 0