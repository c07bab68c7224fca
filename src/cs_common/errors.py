"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Configuration
  2xxx: RPC
  3xxx: Cache
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Configuration ---

class ConfigNotFoundError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Config file not found", 503)


class ConfigMalformedError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(1002, f"Config file malformed: {detail}", 503)


# --- 2xxx: RPC ---

class RpcTransportError(AppError):
    def __init__(self, url: str, detail: str) -> None:
        self.url = url
        super().__init__(2001, f"Transport error from {url}: {detail}", 502)


class RpcProtocolError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2002, detail, 502)


class RpcExhaustedError(AppError):
    def __init__(self, last_error: AppError | None) -> None:
        self.last_error = last_error
        message = last_error.message if last_error else "All RPC endpoints failed"
        super().__init__(2003, message, 502)


# --- 3xxx: Cache ---

class CacheReadError(AppError):
    def __init__(self, key: str, detail: str) -> None:
        super().__init__(3001, f"Unreadable cache entry {key}: {detail}", 500)


# --- 9xxx: System ---

class MethodNotAllowedError(AppError):
    def __init__(self) -> None:
        super().__init__(9001, "Method not allowed", 405)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
