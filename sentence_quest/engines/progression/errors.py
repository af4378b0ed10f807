"""
Typed errors raised by the progression engine.

Routers translate these into HTTP responses; the engine never swallows them.
"""


class ProgressionError(ValueError):
    """Base class for progression failures."""


class NotFoundError(ProgressionError):
    """A referenced player, mission, theme or word does not exist."""

    def __init__(self, entity: str, entity_id: object):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity.capitalize()} not found")


class InvalidInputError(ProgressionError):
    """Input the engine cannot normalize (malformed batch, negative hints...)."""


class ConflictError(ProgressionError):
    """Reserved: current writes are monotonic/idempotent and never conflict."""
