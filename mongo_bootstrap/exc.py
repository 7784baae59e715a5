from typing import Any


class BaseAppError(Exception):
    """Base exception for application-specific errors"""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class DatabaseConnectionError(BaseAppError):
    """Raised when a scoped connection cannot be opened"""

    def __init__(
        self,
        message: str = "Could not connect to the database",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="DATABASE_CONNECTION_ERROR",
            details=details or {},
        )


class DatabaseNotConnectedError(BaseAppError):
    """Raised when the database handle is used while disconnected"""

    def __init__(
        self,
        message: str = "Database is not connected",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="DATABASE_NOT_CONNECTED",
            details=details or {},
        )


class IndexReconciliationError(BaseAppError):
    """Raised when an index cannot be converged to its declared shape"""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="INDEX_RECONCILIATION_ERROR",
            details=details or {},
        )


class DatabaseInitializationError(BaseAppError):
    """Raised when startup reconciliation did not fully succeed"""

    def __init__(
        self,
        message: str = "Some parts of the database failed to initialize",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="DATABASE_INITIALIZATION_ERROR",
            details=details or {},
        )
