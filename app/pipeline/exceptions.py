class PipelineError(Exception):
    """Base exception for import pipeline errors."""


class ImportCancelledError(PipelineError):
    """Raised when a cancellation request stops the pipeline between stages."""


class InvalidProgressTransitionError(PipelineError):
    """Raised when a progress transition skips or reverses the stage order."""
