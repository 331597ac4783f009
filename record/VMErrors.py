# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-12
# Description: VMErrors
# -----------------------------------------------------------------------------


class VMIndexError(Exception):
    """Base class for every error raised by the voicemail index."""


class EmbeddingError(VMIndexError):
    pass


class EmbeddingUnavailable(EmbeddingError):
    """Provider unreachable, timed out, or reported a model / non-2xx error."""


class EmbeddingMalformed(EmbeddingError):
    """Provider answered, but the vector is empty, non-finite or the wrong length."""


class StoreError(VMIndexError):
    pass


class StoreUnavailable(StoreError):
    """Vector store unreachable, timed out, or failed the request."""


class DimensionMismatch(StoreError):
    def __init__(self, collection: str, expected: int, actual: int):
        self.collection = collection
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Vector length {actual} does not match dimensionality {expected} "
            f"of collection '{collection}'"
        )


class PipelineAborted(VMIndexError):
    """The target collection could not be created or reached; nothing was ingested."""
