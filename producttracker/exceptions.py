"""
Error kinds raised by the Product Tracker services and stores.

Each exception carries the HTTP status and machine-readable code it maps to,
so the API layer can translate it without inspecting the failure.
"""


class ProductTrackerException(Exception):
    """Base exception for Product Tracker errors."""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        detail: str = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.detail = detail
        super().__init__(message)


class ValidationError(ProductTrackerException):
    """Input validation failed."""

    def __init__(self, message: str, detail: str = None, code: str = "VALIDATION_ERROR"):
        super().__init__(
            message=message,
            code=code,
            status_code=400,
            detail=detail,
        )


class DuplicateEmailError(ValidationError):
    """A user with this email is already registered."""

    def __init__(self):
        super().__init__(
            message="User with this email already exists",
            code="DUPLICATE_EMAIL",
        )


class InvalidCredentialsError(ValidationError):
    """Login failed. Same message for unknown email and wrong password."""

    def __init__(self):
        super().__init__(
            message="Invalid Credentials",
            code="INVALID_CREDENTIALS",
        )


class NoFieldsError(ValidationError):
    """Partial update carried no updatable field."""

    def __init__(self):
        super().__init__(
            message="No fields provided for update.",
            code="NO_FIELDS",
        )


class UnsupportedFileTypeError(ValidationError):
    """Upload content type or extension is outside the allow-list."""

    def __init__(self, detail: str = None):
        super().__init__(
            message="Only images (JPEG, JPG, PNG, GIF) and PDF files are allowed!",
            code="UNSUPPORTED_FILE_TYPE",
            detail=detail,
        )


class FileTooLargeError(ValidationError):
    """Upload exceeds the configured size cap."""

    def __init__(self, max_bytes: int):
        super().__init__(
            message="File too large",
            code="FILE_TOO_LARGE",
            detail=f"Maximum upload size is {max_bytes // (1024 * 1024)}MB",
        )


class MissingTokenError(ProductTrackerException):
    """No token presented on a protected request."""

    def __init__(self):
        super().__init__(
            message="No Token, authorization denied",
            code="MISSING_TOKEN",
            status_code=401,
        )


class InvalidTokenError(ProductTrackerException):
    """Token signature, expiry or payload check failed."""

    def __init__(self, detail: str = None):
        super().__init__(
            message="Token is not valid",
            code="INVALID_TOKEN",
            status_code=401,
            detail=detail,
        )


class NotFoundError(ProductTrackerException):
    """
    Resource not found.

    Also raised when the record exists but belongs to another user, so
    callers cannot probe for other users' records.
    """

    def __init__(self, resource: str, message: str = None):
        super().__init__(
            message=message or f"{resource} not found or unauthorized",
            code="NOT_FOUND",
            status_code=404,
        )
        self.resource = resource


class ServerError(ProductTrackerException):
    """Store or storage failure."""

    def __init__(self, message: str = "Server error", detail: str = None):
        super().__init__(
            message=message,
            code="INTERNAL_ERROR",
            status_code=500,
            detail=detail,
        )
