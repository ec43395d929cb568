"""Application-level exceptions."""


class AppError(Exception):
    """Base exception for application errors."""

    def __init__(self, message: str, code: str = "APP_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(AppError):
    """Raised when input validation fails."""

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class NotFoundError(AppError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} not found: {identifier}", code="NOT_FOUND")


class RefreshInProgressError(AppError):
    """Raised when a refresh is requested while another one is still running."""

    def __init__(self):
        super().__init__(
            "A fund data refresh is already running",
            code="REFRESH_IN_PROGRESS",
        )


class FundDataError(AppError):
    """Raised by fund data providers on transport or parse failure."""

    def __init__(self, fund_code: str, reason: str):
        self.fund_code = fund_code
        super().__init__(
            f"Fund data unavailable for {fund_code}: {reason}",
            code="FUND_DATA_ERROR",
        )
