class LearningError(Exception):
    """Base exception for correction learning errors."""


class BlankMerchantError(LearningError):
    """Raised when a correction has no usable merchant name."""
