class LLMError(Exception):
    """Base exception for completion provider failures."""


class LLMNetworkError(LLMError):
    """Raised when the provider call fails due to network/infrastructure issues."""


class LLMResponseError(LLMError):
    """Raised when the provider answers with no usable content."""
