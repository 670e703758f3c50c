"""Исключения клиента хранилища контента"""
from __future__ import annotations

from typing import Dict, Optional


class AdminClientError(Exception):
    """Базовая ошибка клиента"""

    pass


class ValidationError(AdminClientError):
    """Ошибка проверки полей формы (до обращения к хранилищу)"""

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(self.errors.values()) or "Некорректные данные формы")


class FetchError(AdminClientError):
    """Сетевая ошибка, таймаут или ошибка сервера (5xx)"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class TreeIntegrityError(FetchError):
    """Ответ хранилища не образует лес (цикл или дубликат id)"""

    pass


class BusinessRejection(AdminClientError):
    """Хранилище отклонило операцию (success: false)"""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class SubmitInProgressError(AdminClientError):
    """Отправка формы уже выполняется"""

    pass
