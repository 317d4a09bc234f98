from app.pipeline.exceptions import PipelineError


class ImportSessionError(PipelineError):
    """Raised when an import session cannot proceed (failed parse, nothing to confirm, save error)."""
