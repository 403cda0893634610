"""
Error kinds raised by the Kindred services.

Services raise these; the operation boundary turns them into
``{'error': {'kind': ..., 'message': ...}}`` values and the HTTP layer
picks a status code. Nothing here knows about HTTP.
"""


class KindredError(Exception):
    """Base exception for all Kindred errors."""
    kind = 'Internal'
    default_message = 'Internal error'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {'kind': self.kind, 'message': self.message}


class Unauthorized(KindredError):
    """No authenticated actor, or the actor is not a participant/admin."""
    kind = 'Unauthorized'
    default_message = 'Authentication required'


class NotFound(KindredError):
    """Referenced user, match, conversation or photo does not exist."""
    kind = 'NotFound'
    default_message = 'Record not found'


class InvalidOperation(KindredError):
    """Self-targeting action or malformed request."""
    kind = 'InvalidOperation'
    default_message = 'Invalid operation'


class InvalidInput(InvalidOperation):
    """Field-level validation failure (blank content, bad email, ...)."""
    default_message = 'Invalid input'


class Conflict(KindredError):
    """Unique-constraint race on an upsert. Callers treat it as success."""
    kind = 'Conflict'
    default_message = 'Record already exists'


class InternalError(KindredError):
    """Store failure surfaced to the caller."""
    kind = 'Internal'
