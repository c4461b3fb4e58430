from typing import List


class UserServiceError(Exception):
    """Base class for failures the HTTP layer maps to a client response."""


class ValidationFailure(UserServiceError):
    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors))
        self.errors = list(errors)


class EmailConflictError(UserServiceError):
    def __init__(self, email: str):
        super().__init__(f"Email '{email}' is already registered.")
        self.email = email


class UserNotFoundError(UserServiceError):
    def __init__(self, user_id: int):
        super().__init__(f"User with ID {user_id} not found.")
        self.user_id = user_id


class OperationCancelled(UserServiceError):
    def __init__(self, operation: str):
        super().__init__(f"Operation '{operation}' was cancelled before commit.")
        self.operation = operation
