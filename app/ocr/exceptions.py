class OcrError(Exception):
    """Raised when text recognition fails for an image."""


class PdfExtractionError(Exception):
    """Raised when a document cannot be split into pages."""
