"""
Error types shared by the clients, the controller and the CLI.
"""

from __future__ import annotations

import httpx


class SimuladoError(Exception):
    """Base class for every error raised by simulado-cli."""


class SimuladoValidationError(SimuladoError):
    """A local action was rejected before reaching the network."""


class SimuladoApiError(SimuladoError):
    """A remote call failed (connectivity, timeout or non-2xx status)."""

    def __init__(self, message: str, status_code: int | None = None, detail: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail

    @classmethod
    def from_http_error(cls, message: str, error: httpx.HTTPError) -> SimuladoApiError:
        """Wrap an httpx error, keeping the server's `detail` when it sent one."""
        status_code = None
        detail = None
        if isinstance(error, httpx.HTTPStatusError):
            status_code = error.response.status_code
            try:
                body = error.response.json()
            except ValueError:
                body = None
            if isinstance(body, dict):
                detail = body.get("detail") or body.get("message")
        return cls(message, status_code=status_code, detail=detail or str(error))

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401


class FinalizeError(SimuladoError):
    """Finalizing an exam or fetching its graded details failed."""


class ExamLoadError(SimuladoError):
    """A past exam could not be loaded from history."""
