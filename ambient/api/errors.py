"""API error type and the ``{"error": message}`` response shape."""

from fastapi.responses import JSONResponse


class ApiError(Exception):
    """A route-specific failure with its HTTP status and message."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(message)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})
