from accumulation_tracker.display import (
    format_amount,
    format_countdown,
    format_reps,
    format_seconds,
    format_seconds_with_decimal,
    format_time,
)

def test_seconds_floor():
    assert format_seconds(42.9) == "42s"
    assert format_seconds(0) == "0s"

def test_seconds_with_decimal():
    assert format_seconds_with_decimal(4.2) == "4.2s"
    assert format_seconds_with_decimal(12) == "12.0s"

def test_time_minutes_seconds():
    assert format_time(0) == "0:00"
    assert format_time(65) == "1:05"
    assert format_time(3600) == "60:00"

def test_reps_plural():
    assert format_reps(1) == "1 rep"
    assert format_reps(0) == "0 reps"
    assert format_reps(12.0) == "12 reps"

def test_countdown():
    assert format_countdown(15) == "15s"

def test_amount_by_mode():
    assert format_amount(35, "time") == "35s"
    assert format_amount(23, "reps") == "23 reps"
