"""Error taxonomy shared by the chat client core and the backend.

Nothing here is retried automatically. Auth failures are raised to the caller,
everything else is logged and turned into a chat message or an HTTP error body.
"""


class GuaError(Exception):
    pass


class AuthError(GuaError):
    """Invalid credentials or an identity service failure."""


class StoreError(GuaError):
    """A durable read or write failed."""


class CompletionError(GuaError):
    """Network, HTTP or payload failure talking to the completion service."""


class IngestionError(GuaError):
    """A document could not be turned into text."""


class UnsupportedDocumentType(IngestionError):
    pass


class ConfigurationError(GuaError):
    """A required setting (usually a secret) is missing."""
