"""
Error taxonomy for the ingestion pipeline.

Every error carries the HTTP status the transport layer should answer with.
Dimension-name conflicts never appear here: the resolver absorbs them.
"""


class BenchwatchError(Exception):
    """Base class for all errors surfaced to callers."""
    status_code = 500
    retryable = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {'error': self.message, 'retryable': self.retryable}


class NotFound(BenchwatchError):
    """Referenced project, threshold, alert or dimension does not exist."""
    status_code = 404


class InvalidInput(BenchwatchError):
    """Submission rejected before any storage call."""
    status_code = 400


class AlreadyExists(BenchwatchError):
    """A project with the same slug already exists for this owner."""
    status_code = 409


class StorageUnavailable(BenchwatchError):
    """A storage call failed. Retrying is left to the caller."""
    status_code = 503
    retryable = True


class Unauthorized(BenchwatchError):
    """No submitter identity, or the ingest token did not match."""
    status_code = 401


class StorageRejected(BenchwatchError):
    """Storage refused the statement (constraint, type or SQL error). Retrying will not help."""
    status_code = 500
