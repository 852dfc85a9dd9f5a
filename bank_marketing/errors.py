"""
Error kinds raised while balancing, scoring and evaluating a strategy.
"""


class BankMarketingError(Exception):
    """Base class for precondition violations inside a strategy pipeline."""


class InsufficientDataError(BankMarketingError):
    """A class has no rows (before or after balancing)."""


class LabelMismatchError(BankMarketingError):
    """Predictions and true labels are misaligned or use unknown labels."""


class UndefinedMetricError(BankMarketingError):
    """A rate metric has a zero denominator."""
