from typing import Any

from fastapi import HTTPException, status


class DuplicatePostKeyException(HTTPException):
    def __init__(self, detail: Any = None) -> None:
        super().__init__(status.HTTP_409_CONFLICT, detail=detail)


class FrontMatterException(Exception):
    """Raised when a document has no usable metadata header."""


class PostNotFoundException(HTTPException):
    def __init__(self, detail: Any = None) -> None:
        super().__init__(status.HTTP_404_NOT_FOUND, detail=detail)


class PostValidationException(HTTPException):
    def __init__(self, detail: Any = None, errors: list[str] | None = None) -> None:
        super().__init__(status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)
        self.errors = errors or []


class PublishException(HTTPException):
    def __init__(self, detail: Any = None) -> None:
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
