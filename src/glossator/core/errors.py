class GlossatorError(Exception):
    """Base error for all user-facing Glossator exceptions."""


class ConfigurationError(GlossatorError):
    """Raised when configuration is invalid or incomplete."""


class ProjectNotInitializedError(GlossatorError):
    """Raised when .glossator metadata is missing."""


class ValidationError(GlossatorError):
    """Raised when record fields fail validation."""


class NotFoundError(GlossatorError):
    """Raised when a project, document, code or segment does not exist."""


class InvalidReferenceError(GlossatorError):
    """Raised when a code id is unknown or belongs to another project."""


class InvalidRangeError(GlossatorError):
    """Raised when segment offsets fall outside the document text."""


class SuggestionsDisabledError(GlossatorError):
    """Raised when suggestions are requested while they are switched off."""


class UpstreamError(GlossatorError):
    """Base for failures of the suggestion provider."""


class UpstreamUnavailableError(UpstreamError):
    """Raised when the provider call fails, times out or returns non-success."""


class UpstreamMalformedError(UpstreamError):
    """Raised when the provider answers without any text."""
