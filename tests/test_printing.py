import pytest

from phdoser.printing import fixed_float, pad_int, pad_text, render_line, render_report
from phdoser.state import Cooldown, DoserState, Mode, Phase


def test_pad_int_left_aligns():
    assert pad_int(5, 4) == "5   "


def test_pad_int_counts_minus_sign():
    assert pad_int(-12, 5) == "-12  "


def test_pad_int_never_truncates():
    assert pad_int(12345, 3) == "12345"


@pytest.mark.parametrize("value,width", [(0, 4), (7, 1), (-3, 6), (999, 2), (42, 10)])
def test_pad_int_width_invariant(value, width):
    text = pad_int(value, width)
    assert text.startswith(str(value))
    assert len(text) == max(width, len(str(value)))
    assert text.strip() == str(value)


def test_fixed_float_two_decimals():
    assert fixed_float(3.14159, 2, 6) == "3.14  "


def test_fixed_float_negative():
    assert fixed_float(-1.5, 2, 6) == "-1.50 "


def test_fixed_float_large_value_unpadded():
    assert fixed_float(1000.0, 2, 6) == "1000.00"


def test_pad_text():
    assert pad_text("(WAIT)", 7) == "(WAIT) "
    assert pad_text("(READY)", 5) == "(READY)"


def test_cluster_header_line():
    state = DoserState()
    assert render_line(state, 0, 1) == (
        "|/|===PH===ClUSTER==SAMPLES=================================|/|\n"
    )


def test_end_line():
    state = DoserState()
    assert render_line(state, 0, 999) == (
        "|/|==========================END============================|/|\n"
    )


@pytest.mark.parametrize("line", [3, 4, 5, 6, 607, 12345])
def test_unused_lines_are_empty(line):
    assert render_line(DoserState(), 0, line) == ""


def test_cluster_table_marks_current_row():
    state = DoserState()
    state.current_ph = 7.0
    state.clustered[4] = 12
    lines = render_line(state, 0, 2).splitlines()
    assert len(lines) == len(state.ph_values)
    assert sum("->" in line for line in lines) == 1
    assert lines[4].startswith("|/|->7.00<-|->609<-|->12<-")
    assert all(line.startswith("|/|") and line.endswith("|/|") for line in lines)
    assert len({len(line) for line in lines}) == 1


def test_status_line_watching():
    state = DoserState()
    state.setter_timer = Cooldown(5000)
    text = render_line(state, 2000, 0)
    assert text.startswith("|/|=B=E=G=I=N=N=I=N=G=")
    assert "Mode: Doser" in text
    assert "phase: Watching   |/|" in text
    assert "SetterCD: 3   " in text


def test_status_line_lowering_shows_pump():
    state = DoserState(phase=Phase.LOWERING)
    text = render_line(state, 0, 0)
    assert "PumperCD: " in text
    assert "PumpTime: " in text
    assert "(ms)" in text


def test_status_line_calibrator_has_no_pump_time():
    state = DoserState(mode=Mode.CALIBRATOR)
    text = render_line(state, 0, 0)
    assert "Mode: Calibrator" in text
    assert "PumpTime" not in text


def test_calibration_summary_readiness():
    state = DoserState()
    assert "(WAIT) " in render_line(state, 0, 602)
    state.enough_samples = True
    assert "(READY)" in render_line(state, 0, 602)
    assert "/1024)" in render_line(state, 0, 602)


def test_adc_table_rows():
    state = DoserState()
    state.adc_values[0] = 610
    state.adc_occurrences[0] = 12
    text = render_line(state, 0, 601)
    assert text.count("\n") == 1
    assert "0 (x)" in text
    state.med_values[3] = 610
    state.med_occurrences[3] = 5
    matched = render_line(state, 0, 601)
    assert "0 (x)" not in matched
    assert pad_int(5, 6) + " |/|" in matched


def test_calibration_table_rows():
    state = DoserState()
    state.calibration_values[0] = 593
    lines = render_line(state, 0, 603).splitlines()
    assert lines[0] == "|/|==PH======CLUSTERCENTER===STDDEV=========================|/|"
    assert len(lines) == 1 + len(state.ph_values)
    assert "593.00" in lines[1]


def test_report_not_due_returns_none():
    state = DoserState()
    state.printer_timer = Cooldown(5000)
    state.printer_timer.restart(1000)
    assert render_report(state, 2000) is None
    assert state.print_iteration == 0


def test_doser_report_increments_iteration():
    state = DoserState()
    text = render_report(state, 0)
    assert text.startswith("|/|=B=E=G")
    assert "ClUSTER" in text
    assert state.print_iteration == 1
    assert "prntNr: 1   " in render_report(state, 0)


def test_calibrator_report_ends_with_end_line():
    state = DoserState(mode=Mode.CALIBRATOR)
    text = render_report(state, 0)
    assert text.endswith("|/|==========================END============================|/|\n")
    assert "titTime(ms)" in text