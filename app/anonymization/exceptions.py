class AnonymizationError(Exception):
    """Raised when anonymization fails unexpectedly."""
