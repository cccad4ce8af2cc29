from fastapi import HTTPException, status

class RoutineSenseException(Exception):
    """Base exception for RoutineSense"""
    pass

class AuthenticationError(RoutineSenseException):
    """Raised when an operation needs a signed-in user"""
    pass

class ResourceNotFoundError(RoutineSenseException):
    """Raised when requested resource doesn't exist"""
    pass

class ServiceUnavailableError(RoutineSenseException):
    """Raised when external service is unavailable"""
    pass

class RemoteStoreError(ServiceUnavailableError):
    """Raised when the remote store rejects or fails an operation"""
    pass

# Common HTTP exceptions
def not_found(detail: str = "Resource not found"):
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=detail
    )

def bad_request(detail: str = "Bad request"):
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=detail
    )

def unauthorized(detail: str = "Unauthorized"):
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"}
    )

def internal_error(detail: str = "Internal server error"):
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=detail
    )
