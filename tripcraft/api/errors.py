"""Translation of domain errors to HTTP responses."""

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from tripcraft.errors import AccessDeniedError, InvalidInputError, NotFoundError, TripcraftError


class ShareAccessHTTPException(HTTPException):
    """403 carrying the requiresToken hint for share clients."""

    def __init__(self, detail: str, requires_token: bool) -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
        self.requires_token = requires_token


def http_error(error: TripcraftError) -> HTTPException:
    """Map a domain error to the matching HTTPException.

    Returns:
        400 for invalid input, 404 for unknown ids, 403 for share access
    """
    if isinstance(error, AccessDeniedError):
        return ShareAccessHTTPException(str(error), error.requires_token)
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, InvalidInputError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="internal error")


async def share_access_handler(request: Request, exc: ShareAccessHTTPException) -> JSONResponse:
    """Render share denials as {"detail", "requiresToken"}."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "requiresToken": exc.requires_token},
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report request validation failures as 400."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ShareAccessHTTPException, share_access_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
