"""
Error types for the Taskboard API
Each exception carries the HTTP status it maps to and a client-safe message
"""
from typing import Any, Dict, List, Optional


class AppException(Exception):
    """Base class for all expected application failures"""
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Dict[str, Any]]] = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


# Validation

class ValidationException(AppException):
    """Malformed input"""
    status_code = 400
    default_message = "Validation failed"


# Authentication

class UnauthenticatedException(AppException):
    """No bearer token on the request"""
    status_code = 401
    default_message = "No token, authorization denied"


class InvalidTokenException(AppException):
    """Bearer token is malformed or its signature does not verify"""
    status_code = 401
    default_message = "Invalid token"


class TokenExpiredException(AppException):
    """Bearer token is past its expiry"""
    status_code = 401
    default_message = "Token expired"


class InvalidCredentialsException(AppException):
    """Email/password pair does not match an active user"""
    status_code = 400
    default_message = "Invalid credentials"


class RateLimitExceededException(AppException):
    """Too many attempts inside the rate limit window"""
    status_code = 429
    default_message = "Too many requests"

    def __init__(self, retry_after: int, message: Optional[str] = None):
        self.retry_after = retry_after
        super().__init__(message or f"Too many attempts. Please wait {retry_after} seconds.")


# Lookup

class NotFoundException(AppException):
    """Entity is absent or owned by another user"""
    status_code = 404
    entity = "Resource"

    def __init__(self, entity_id: Any = None):
        self.entity_id = entity_id
        super().__init__(f"{self.entity} not found")


class UserNotFoundException(NotFoundException):
    entity = "User"


class TaskNotFoundException(NotFoundException):
    entity = "Task"


class CategoryNotFoundException(NotFoundException):
    entity = "Category"


class NoteNotFoundException(NotFoundException):
    entity = "Note"


# Integrity

class DuplicateIdentityException(AppException):
    """Email or username already registered"""
    status_code = 400
    default_message = "User already exists"


class DuplicateNameException(AppException):
    """Category name already used by this owner"""
    status_code = 400
    default_message = "Category name already exists"


class InvalidCategoryException(AppException):
    """Task references a category that does not exist for this owner"""
    status_code = 400
    default_message = "Invalid category"


class DefaultCategoryProtectedException(AppException):
    status_code = 400
    default_message = "Cannot delete default categories"


class CategoryInUseException(AppException):
    """Category still referenced by tasks"""
    status_code = 400

    def __init__(self, task_count: int):
        self.task_count = task_count
        super().__init__(
            f"Cannot delete category with {task_count} task(s). "
            "Please reassign or delete the tasks first."
        )


__all__ = [
    "AppException",
    "ValidationException",
    "UnauthenticatedException",
    "InvalidTokenException",
    "TokenExpiredException",
    "InvalidCredentialsException",
    "RateLimitExceededException",
    "NotFoundException",
    "UserNotFoundException",
    "TaskNotFoundException",
    "CategoryNotFoundException",
    "NoteNotFoundException",
    "DuplicateIdentityException",
    "DuplicateNameException",
    "InvalidCategoryException",
    "DefaultCategoryProtectedException",
    "CategoryInUseException",
]
