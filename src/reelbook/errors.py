"""Exception types raised by the simulation engine."""


class ReelbookError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(ReelbookError, ValueError):
    """Raised when static game or simulation configuration is invalid."""


class BoardError(ReelbookError):
    """Raised when a board operation cannot be performed.

    Covers malformed reel strips (an index resolving to no symbol) and
    operations called out of order, such as tumbling before drawing.
    """


class WalletConsistencyError(ReelbookError):
    """Raised when per-spin-type wins no longer sum to the total win."""


class SimulationError(ReelbookError):
    """Raised when a worker fails and a game mode cannot be completed."""
