"""Error taxonomy shared by the retrieval services and repositories."""


class RetrievalError(Exception):
    """Base class for all retrieval engine errors."""


class InvalidInputError(RetrievalError, ValueError):
    """Raised when a caller passes a malformed or out-of-range parameter.

    Always raised before any storage access.
    """


class StorageError(RetrievalError):
    """Raised when the chunk, edge or metadata store fails or is unreachable."""


class EmbeddingError(RetrievalError):
    """Raised when the embedding function fails or returns a malformed vector."""


class DataIntegrityError(RetrievalError):
    """Raised when a stored row violates an invariant (e.g. embedding size).

    Batch code treats this as fatal for the offending row only.
    """
