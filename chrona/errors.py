"""
Exception hierarchy.

Configuration mistakes raise; anything that happens while rendering a line
for a live request degrades the line instead.
"""


class ChronaError(Exception):
    """Base class for errors raised by chrona."""


class TransporterError(ChronaError, TypeError):
    """The sink option is neither a callable nor carries a callable ``transporter``."""


class PlanInvariantError(ChronaError, ValueError):
    """A Plan's placeholder slots do not line up with its field renderers."""
