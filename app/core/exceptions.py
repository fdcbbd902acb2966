from __future__ import annotations


class AppError(Exception):
    def __init__(self, message: str, status_code: int = 500, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(message)


class NotFoundError(AppError):
    def __init__(self, message: str = "Nenhum credito encontrado"):
        super().__init__(message, status_code=404, code="NOT_FOUND")


class StoreError(AppError):
    """The record store could not answer the query. Never retried."""

    def __init__(self, message: str = "Base de creditos indisponivel"):
        super().__init__(message, status_code=503, code="STORE_UNAVAILABLE")
