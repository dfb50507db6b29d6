# Domain exceptions raised by the service layer.
#
# Routers translate these into HTTP responses; services never build
# HTTP responses themselves.


class WebBlogError(Exception):
    """Base class for every business error raised by a service."""
    pass


# --- Not found ---
class EntityNotFoundError(WebBlogError):
    """The requested entity does not exist."""

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


# --- Validation ---
class DuplicateEntityError(WebBlogError):
    """An entity with the same unique value already exists."""

    def __init__(self, entity: str, field: str, value):
        self.entity = entity
        self.field = field
        self.value = value
        super().__init__(f"{entity} with {field} '{value}' already exists")


class UpdateFailedError(WebBlogError):
    """The entity could not be attached to the session for an update."""
    pass


# --- Concurrency ---
class ConcurrencyConflictError(WebBlogError):
    """The row was modified by another request since it was read."""

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} was modified by another request")


# --- Auth ---
class AuthenticationError(WebBlogError):
    """Credentials were rejected."""
    pass
