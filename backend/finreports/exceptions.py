"""
Domain exceptions for the application.

Services raise these instead of fastapi.HTTPException to avoid coupling
the service layer to the web framework. A global exception handler in
main.py translates them into HTTP responses.
"""


class AppError(Exception):
    """Base application error with an HTTP-equivalent status code."""

    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ValidationError(AppError):
    """Input validation failure (400)."""

    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class ReportError(AppError):
    """Base class for report compilation failures."""


class UnsupportedReportTypeError(ReportError):
    """Requested report type has no generator (400)."""

    def __init__(self, report_type):
        self.report_type = report_type
        super().__init__(f"Unsupported report type: {report_type}", status_code=400)


class UnsupportedFormatError(ReportError):
    """Requested output format is not one of pdf/csv/xlsx (400)."""

    def __init__(self, report_format):
        self.report_format = report_format
        super().__init__(f"Unsupported report format: {report_format}", status_code=400)


class InvalidReportDataError(ReportError):
    """A report row could not be read into its row model (400)."""

    def __init__(self, message: str, row_index: int = None):
        self.row_index = row_index
        if row_index is not None:
            message = f"Invalid report row at index {row_index}: {message}"
        super().__init__(message, status_code=400)


class RenderBackendError(ReportError):
    """A format backend was misused or failed to serialize (500)."""

    def __init__(self, message: str):
        super().__init__(message, status_code=500)
