# accumulation_tracker/errors.py
"""Error kinds shared by the engine, the stores and the HTTP layer."""


class TrackerError(Exception):
    pass


class InvalidConfiguration(TrackerError):
    """Target below 1, negative rest or negative adjustment. Session not started."""


class InvalidTransition(TrackerError):
    """Operation not allowed in the current phase or training mode."""


class NotArmed(InvalidTransition):
    """Hold ended before the arming delay elapsed; the tap is ignored."""


class PersistenceFailure(TrackerError):
    """A local or remote write failed. Logged and tolerated by callers."""


class DecodeFailure(TrackerError):
    """Stored data could not be decoded."""
