"""
Error taxonomy for the API.

Every error is an HTTPException so route handlers and dependencies can raise it
directly and FastAPI renders it as {"detail": "..."}:

- InvalidInput (400): missing or malformed request fields
- Unauthorized (401): bad nonce, bad signature, missing/invalid/expired session
- Forbidden (403): authenticated wallet does not own the requested resource
- NotFound (404): resource does not exist
- StorageError (500): persistence failure, safe for the client to retry

Unauthorized messages are deliberately generic; they never say which check failed
beyond what the client needs to recover (new nonce vs. new signature vs. re-login).
"""

from typing import Optional

from fastapi import HTTPException, status


class InvalidInput(HTTPException):
    def __init__(self, detail: str = "Invalid request") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class Unauthorized(HTTPException):
    def __init__(self, detail: str = "Please reconnect your wallet and try again") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class Forbidden(HTTPException):
    def __init__(self, detail: str = "Forbidden") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail: str = "Not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class StorageError(HTTPException):
    def __init__(self, detail: Optional[str] = None) -> None:
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail or "Storage error, please try again",
        )
