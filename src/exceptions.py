"""Application error taxonomy.

Services raise these; src/app.py turns them into JSON responses with an
explicit outcome code.
"""
from typing import Optional, Dict, Any


class AppException(Exception):
    """Base exception for the application"""
    def __init__(
        self,
        message: str,
        code: str = "internal_error",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(AppException):
    """Missing, blank or malformed required input"""
    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="validation_error", status_code=400, details=details)


class NotFoundError(AppException):
    """Referenced entity does not exist"""
    def __init__(self, message: str = "Resource not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="not_found", status_code=404, details=details)


class ConflictError(AppException):
    """Duplicate creation or duplicate membership; details carry the current state"""
    def __init__(self, message: str = "Resource conflict", details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="conflict", status_code=409, details=details)


class InternalError(AppException):
    """Unexpected store or collaborator failure"""
    def __init__(self, message: str = "Internal error", details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="internal_error", status_code=500, details=details)


class ServiceError(InternalError):
    """External text-generation service failed or answered garbage"""
    def __init__(self, message: str = "AI service error", details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, details=details)
        self.code = "service_error"
