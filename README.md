# phdoser

`phdoser` keeps the pH of a nutrient solution inside a target window. It
reads a pH probe through an ADC and filters the readings heavily. It then
decides which pH the solution is at and runs an acid pump for a time that
depends on how far the pH is above the window.

## How a reading becomes a pH

1. A burst of raw ADC samples is taken (360 by default). Samples outside the
   accepted ADC range (300 to 900 by default) are read again.
2. Each burst is reduced to a trimmed mean. A series of 36 such means is
   checked for spread with a sample standard deviation.
3. If the spread is below the limit (1.5 by default), a second trimmed mean
   of the series is matched to the nearest cluster center. The vote counter
   of that center is raised. When two neighbouring centers are equally near,
   both are counted.
4. The pH whose counter is highest, and above a third of the cluster limit,
   becomes the current pH. The counters decay over time so that old votes
   fade.

## Phases and dosing

The controller is in one of two phases (`Phase.WATCHING` and
`Phase.LOWERING`):

- **Watching**: nothing is dosed.
- **Lowering**: the controller switches to this phase once the pH reaches
  the upper limit of the window (6.4 by default). The pump runtime is then
  taken from a runtime table, and the pH band decides which entry is used.
  Dosing repeats after a cooldown. Once the pH falls to the lower limit (5.6
  by default), the controller returns to watching.

## Calibration mode

In calibration mode the probe sits in a reference solution of known pH. The
controller records one trimmed mean per pass in a history of 1024 entries.
When the history is full, it keeps the central value (a trimmed mean of the
history) and its standard deviation up to date. You can log both against the
selected reference pH.

## Commands

Commands are lines of text. They are not case sensitive.

| Command | Effect |
|---|---|
| `doser` / `calibrate` | switch to doser or calibrator mode |
| `log` | store the current calibration value and spread for the selected pH, reset the total titration time and move to the next pH |
| `prev` / `next` | select the previous or next reference pH, wrapping around |
| `tittime` | restart the calibration statistics, then run the pump once for the titration time and add it to the total |
| `tit+`, `tit++`, `tit+++`, `tit++++` | lengthen the titration time by 10, 25, 100 or 200 ms |
| `tit-`, `tit--`, `tit---`, `tit----` | shorten the titration time by 10, 25, 100 or 200 ms |
| `emptypump` | run the pump for ten seconds |
| `reset` | restart the calibration statistics |
| `calibscreen` | toggle the calibration screen flag |
| `result` | print the logged cluster centers and deviations as listings |

`rawanal`, `led` and `endcalibration` are accepted, but they do nothing.
`Controller.handle_command` returns whether a command was recognised.

## Running

Install the package, then start the controller:

```
pip install .
phdoser
```

The `phdoser` command runs the loop against a simulated sensor. The sensor
always returns the same ADC reading, and the pump relay does nothing. The
status report for each pass goes to standard output. The options are:

- `--adc N`: the simulated ADC reading (default 621).
- `--passes N`: the number of loop passes (default 1, at least 1).
- `--interval MS`: the milliseconds between passes (default 1000).
- `--mode {Doser,Calibrator}`: the starting mode (default `Doser`).
- `--command TEXT`: a command to send. Repeat the option for more commands,
  which go out one per pass. If there are more commands than passes, the run
  is extended to cover them.

## What it does not do

The package does not talk to a real ADC, relay or serial line by itself.
Neither the command nor the library opens a device or reads commands
interactively. To drive real hardware, pass your own callables to `Pump`
and `Controller`, and call `Controller.tick` with each incoming command
line. There is no LED display and no stability check.

## Using it as a library

The building blocks can be used on their own:

- `phdoser.stats` holds the filtering maths: `median`, `std_dev`,
  `trimmed_mean`, `cluster`, `decay`, `calib_decay` and `sort_by_value`.
- `phdoser.ph` turns cluster votes into a pH (`pick_ph`). It also maps a pH
  to a pump runtime (`select_runtime`) and decides the phase (`next_phase`).
- `phdoser.hardware` holds `read_adc` and the `Pump` relay driver. Both take
  callables that touch your hardware: a reader that returns an ADC value, and
  a relay switch with an optional sleep function.
- `phdoser.state` holds `DoserState`, `Mode`, `Phase` and `Cooldown`, a
  period timer on a wrapping 32-bit millisecond clock.
- `phdoser.printing` renders the fixed-width status report (`render_report`,
  `render_line`) and has the padding helpers `pad_int`, `fixed_float` and
  `pad_text`.
- `phdoser.controller.Controller` ties all of these together. Call `tick`
  once per loop. `result_listing` returns the logged calibration tables as
  text.

```python
from phdoser.stats import median, trimmed_mean

median([3, 1, 2])                        # 2
trimmed_mean([1, 2, 3, 4, 100], 0.25)    # 3.0
```

```python
from phdoser.controller import Controller
from phdoser.hardware import Pump

pump = Pump(lambda on: None, sleep=lambda seconds: None)
controller = Controller(lambda: 621, pump)
controller.tick(1000, "calibrate")
```

## Running the tests

```
pip install .[test]
pytest
```