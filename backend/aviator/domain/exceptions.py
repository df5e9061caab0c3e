"""Domain-specific exceptions — framework-independent."""


class StoreError(Exception):
    """Base class for every failure surfaced by the record store and its collaborators."""


class EntityNotFoundError(StoreError):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class DuplicateEntityError(StoreError):
    """Raised when attempting to create a duplicate entity."""

    def __init__(self, entity_type: str, field: str, value: str):
        self.entity_type = entity_type
        self.field = field
        self.value = value
        super().__init__(f"{entity_type} with {field}='{value}' already exists")


class EntityValidationError(StoreError):
    """Raised when input is missing required fields or carries malformed values."""

    def __init__(self, entity_type: str, message: str, fields: list[str] | None = None):
        self.entity_type = entity_type
        self.message = message
        self.fields = fields or []
        super().__init__(f"Invalid {entity_type}: {message}")


class PersistenceError(StoreError):
    """Raised when the key-value storage refused a write.

    The in-memory state is left untouched for single-key mutations, so the
    caller may retry once storage recovers.
    """

    def __init__(self, keys: list[str] | str):
        self.keys = [keys] if isinstance(keys, str) else list(keys)
        super().__init__(f"Failed to persist {', '.join(self.keys)}")


class AccessDeniedError(StoreError):
    """Raised when a login or connection attempt is refused."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)
