"""
Error taxonomy shared by the automation engine and the alert scanner.

Routers translate these into HTTP responses; background scans log them per
item and move on.
"""


class AutomationError(Exception):
    """Base class for failures raised by the core services."""


class PersistenceError(AutomationError):
    """A read or write against the store failed."""


class NotFoundError(AutomationError):
    """A referenced workspace, contact, form or row does not exist."""

    def __init__(self, entity: str, entity_id=None):
        self.entity = entity
        self.entity_id = entity_id
        if entity_id is None:
            super().__init__(f"{entity} not found")
        else:
            super().__init__(f"{entity} {entity_id} not found")


class ValidationError(AutomationError):
    """A request is missing required identifiers or carries invalid values."""
