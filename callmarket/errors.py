"""Exception types raised by the clearing engine and its input layer."""


class CallMarketError(Exception):
    """Base class for all callmarket errors."""


class OrderParseError(CallMarketError, ValueError):
    """A single order record could not be parsed; the record is skipped."""


class InvariantViolation(CallMarketError, RuntimeError):
    """
    An internal guarantee of the clearing algorithm does not hold.

    Raised for optimality, individual rationality and conservation failures.
    These point at a defect (or at inputs that break the monotone feasibility
    the search relies on) and are never turned into a "no equilibrium" result.
    """
