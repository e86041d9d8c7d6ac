"""Service-layer errors rendered by the API exception handler."""


class ServiceError(Exception):
    """Base class for caller-visible, non-retryable service errors."""

    status_code = 400
    kind = "Bad Request"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(ServiceError):
    status_code = 400
    kind = "Bad Request"


class NotFoundError(ServiceError):
    status_code = 404
    kind = "Not Found"


class InvalidAmountError(BadRequestError):
    """Raised when an amount is not a positive decimal."""


class WalletInactiveError(BadRequestError):
    def __init__(self, message: str = "Wallet is not active"):
        super().__init__(message)


class WalletAlreadyExistsError(BadRequestError):
    def __init__(self, message: str = "User already has a wallet"):
        super().__init__(message)


class InsufficientBalanceError(BadRequestError):
    def __init__(self, available: str, required: str):
        super().__init__(f"Insufficient balance. Available: {available}, Required: {required}")
        self.available = available
        self.required = required


class InsufficientPendingBalanceError(BadRequestError):
    def __init__(self, pending: str, required: str):
        super().__init__(f"Insufficient pending balance. Pending: {pending}, Required: {required}")
        self.pending = pending
        self.required = required


class NegativeBalanceError(BadRequestError):
    def __init__(self, current: str, adjustment: str):
        super().__init__(
            f"Adjustment would result in negative balance. Current: {current}, Adjustment: {adjustment}"
        )


class WalletNotFoundError(NotFoundError):
    def __init__(self, message: str = "Wallet not found"):
        super().__init__(message)


class UserNotFoundError(NotFoundError):
    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class TransactionNotFoundError(NotFoundError):
    def __init__(self, message: str = "Transaction not found"):
        super().__init__(message)


class UnauthorizedError(ServiceError):
    status_code = 401
    kind = "Unauthorized"


class ServerConfigurationError(ServiceError):
    status_code = 500
    kind = "Server configuration error"


class RateLimitExceededError(ServiceError):
    status_code = 429
    kind = "Too Many Requests"

    def __init__(self, retry_after: int):
        super().__init__(f"Rate limit exceeded. Retry after {retry_after} seconds")
        self.retry_after = retry_after
