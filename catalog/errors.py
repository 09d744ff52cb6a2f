class CatalogError(Exception):
    pass


class InvalidURLError(CatalogError):
    def __init__(self, url: str) -> None:
        super().__init__(f"Invalid URL: {url!r}")
        self.url = url


class InvalidResponseError(CatalogError):
    def __init__(self, status_code: int) -> None:
        super().__init__(f"Invalid response from server (HTTP {status_code}).")
        self.status_code = status_code


class DecodingError(CatalogError):
    def __init__(self, message: str = "Could not decode the recipe catalog.") -> None:
        super().__init__(message)


class StorageError(CatalogError):
    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(f"Storage error during {operation}: {reason}")
        self.operation = operation
        self.reason = reason


class NetworkError(CatalogError):
    def __init__(self, cause: Exception) -> None:
        super().__init__(f"Network error: {cause}")
        self.cause = cause
