from __future__ import annotations


class JobschedError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RequestError(JobschedError):
    pass


class NotFoundError(RequestError):
    pass


class ValidationError(RequestError):
    """The server rejected a document, or sent one that could not be decoded."""
