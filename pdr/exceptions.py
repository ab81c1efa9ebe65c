"""
Exceptions raised by the dead reckoning core.

Every failure is local to the sample or call that caused it; a tracking
session survives all of them.
"""


class PDRError(Exception):
    """Base class for dead reckoning errors."""


class NoFixAvailable(PDRError):
    """Tracking cannot start without an absolute position fix."""


class InvalidSample(PDRError):
    """A sensor reading carried NaN or infinite values and was rejected."""


class NumericDegeneracy(PDRError):
    """A computation would produce non-finite output (e.g. near the poles)."""


class ConfigurationError(PDRError, ValueError):
    """A configuration value is out of range or unknown."""


class ChannelClosed(PDRError):
    """A reading was pushed into a closed sample channel."""
