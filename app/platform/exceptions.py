import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.platform.response import api_response


class A11yCheckerError(Exception):
    """Base class for every error raised by the crawl/scan/report pipeline."""


class InvalidUrlError(A11yCheckerError, ValueError):
    """Malformed URL, or a scheme other than http/https."""

    def __init__(self, url: str, reason: str = "must be an absolute http(s) URL"):
        self.url = url
        self.reason = reason
        super().__init__(f"Invalid URL {url!r}: {reason}")


class NavigationError(A11yCheckerError):
    """A page could not be loaded (timeout, network error, driver failure)."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Navigation to {url} failed: {reason}")


class AuditError(A11yCheckerError):
    """The accessibility engine could not be loaded or did not produce a result."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Audit of {url} failed: {reason}")


class StorageError(A11yCheckerError):
    """A report artifact could not be written completely."""


class ReportNotFoundError(A11yCheckerError):
    def __init__(self, report_id: str):
        self.report_id = report_id
        super().__init__(f"Report {report_id!r} not found")


def add_exception_handlers(app):
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return api_response(message=str(exc.detail) or "Error", status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return api_response(
            message="Validation failed",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            data={"errors": exc.errors()},
        )

    @app.exception_handler(InvalidUrlError)
    async def invalid_url_handler(request: Request, exc: InvalidUrlError):
        return api_response(message=str(exc), status_code=status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(ReportNotFoundError)
    async def report_not_found_handler(request: Request, exc: ReportNotFoundError):
        return api_response(message=str(exc), status_code=status.HTTP_404_NOT_FOUND)

    @app.exception_handler(A11yCheckerError)
    async def pipeline_error_handler(request: Request, exc: A11yCheckerError):
        logging.error(f"{type(exc).__name__} while handling {request.url.path}: {exc}")
        return api_response(
            message=f"{type(exc).__name__}: {exc}",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logging.exception(f"Unhandled exception: {exc}")
        return api_response(
            message="Internal server error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
