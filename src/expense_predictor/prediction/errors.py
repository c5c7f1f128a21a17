class PredictionError(Exception):
    """Base class for per-category scoring failures."""
    pass


class UndefinedRateError(PredictionError):
    """
    Raised when a category's expense-rate deviation cannot be computed.

    Happens when the long-run daily rate is zero or there is no long-run
    window at all, or when the deviation is exactly -1 and the coefficient
    term would divide by zero.
    """
    pass


class DegenerateAmountError(PredictionError):
    """Raised when a historical amount of zero makes a similarity ratio undefined."""
    pass
