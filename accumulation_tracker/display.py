"""Formatting for values shown on the training screens."""
import math


def format_seconds(seconds: float) -> str:
    """Whole seconds, e.g. ``42s``."""
    return f"{math.floor(seconds)}s"


def format_seconds_with_decimal(seconds: float) -> str:
    """One decimal place for the running hold timer, e.g. ``4.2s``."""
    return f"{seconds:.1f}s"


def format_time(seconds: float) -> str:
    """Session duration as ``M:SS``."""
    mins, secs = divmod(math.floor(seconds), 60)
    return f"{mins}:{secs:02d}"


def format_reps(reps: float) -> str:
    count = int(reps)
    return f"{count} {'rep' if count == 1 else 'reps'}"


def format_countdown(seconds: float) -> str:
    return f"{math.floor(seconds)}s"


def format_amount(value: float, mode: str) -> str:
    """Accumulated/target/remaining amounts in the unit of the training mode."""
    return format_seconds(value) if mode == "time" else format_reps(value)
