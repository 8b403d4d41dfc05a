from __future__ import annotations


class ReportError(Exception):
    """Base class for failures that abort a report run."""


class CredentialError(ReportError):
    pass


class ApiError(ReportError):
    def __init__(self, path: str, message: str, status_code: int | None = None) -> None:
        self.path = path
        self.status_code = status_code
        prefix = f"/{path}"
        if status_code is not None:
            prefix = f"{prefix} (HTTP {status_code})"
        super().__init__(f"{prefix}: {message}")


class CacheError(ReportError):
    pass
