"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class NotFoundError(DomainException):
    """Referenced user, alert or subscription does not exist"""

    def __init__(self, entity: str, entity_id):
        super().__init__(f"{entity} not found with id: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(DomainException):
    """Unique attribute (username, email) already taken"""

    pass


class UnauthorizedError(DomainException):
    """Credentials did not match"""

    pass


class InvalidRequestError(DomainException):
    """Request is malformed or out of range"""

    pass
