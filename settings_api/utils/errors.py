from fastapi import HTTPException, status


class ValidationError(HTTPException):
    """Malformed or missing request input."""

    def __init__(self, detail: str = "invalid request"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class AuthError(HTTPException):
    """Bad credentials, or a missing or invalid token."""

    def __init__(self, detail: str = "unauthorized"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class NotFoundError(HTTPException):
    def __init__(self, detail: str = "setting not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class BackendError(HTTPException):
    """A store or cache call failed. The detail is always a static message."""

    def __init__(self, detail: str = "internal error"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
