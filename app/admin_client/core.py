"""Базовый HTTP клиент для работы с хранилищем контента."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

import httpx
from httpx import Limits
from pydantic import ValidationError as SchemaError

from app.config import get_settings

from .exceptions import BusinessRejection, FetchError
from .schemas import StoreResult

logger = logging.getLogger(__name__)

# Глобальный пул соединений для хранилища
_admin_http_client: httpx.Client | None = None

DEFAULT_REJECTION = "Операция отклонена сервером"


def _get_admin_client() -> httpx.Client:
    """Получить или создать HTTP клиент с connection pooling"""
    global _admin_http_client
    if _admin_http_client is None:
        _admin_http_client = httpx.Client(
            limits=Limits(max_connections=10, max_keepalive_connections=5),
            timeout=get_settings().request_timeout,
        )
    return _admin_http_client


@dataclass
class AdminClientCore:
    """Базовый клиент с HTTP методами"""

    base_url: str = field(default_factory=lambda: get_settings().api_base_url)
    timeout: float = field(default_factory=lambda: get_settings().request_timeout)
    http_client: Optional[httpx.Client] = field(default=None, repr=False)

    def _http(self) -> httpx.Client:
        return self.http_client if self.http_client is not None else _get_admin_client()

    def _headers(self) -> dict:
        return {"Content-Type": "application/json"}

    def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Отправить запрос и привести ошибки к FetchError / BusinessRejection"""
        kwargs.setdefault("headers", self._headers())
        logger.debug(f"{method.upper()} {url}")
        try:
            resp = self._http().request(method.upper(), url, timeout=self.timeout, **kwargs)
        except httpx.TimeoutException as e:
            logger.error(f"Таймаут запроса {method.upper()} {url}: {e}")
            raise FetchError(f"Сервер не ответил за {self.timeout:g} с") from e
        except httpx.InvalidURL as e:
            logger.error(f"Некорректный адрес {url!r}: {e}")
            raise FetchError(f"Некорректный адрес: {e}") from e
        except httpx.HTTPError as e:
            logger.error(f"Сетевая ошибка при запросе {method.upper()} {url}: {e}")
            raise FetchError(f"Сервер недоступен: {e}") from e

        if resp.status_code >= 500:
            logger.error(f"{method.upper()} {url} -> {resp.status_code}")
            raise FetchError(f"Ошибка сервера: {resp.status_code}", resp.status_code)
        if resp.status_code >= 400:
            rejection = self._rejection_from(resp)
            if rejection is not None:
                logger.warning(f"{method.upper()} {url} отклонён: {rejection.message}")
                raise rejection
            logger.error(f"{method.upper()} {url} -> {resp.status_code}")
            raise FetchError(f"Ошибка запроса: {resp.status_code}", resp.status_code)
        return resp

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        return self._send(method, f"{self.base_url}{path}", **kwargs)

    @staticmethod
    def _rejection_from(resp: httpx.Response) -> Optional[BusinessRejection]:
        """4xx с телом {success: false, message} - отказ по бизнес-правилам"""
        try:
            body = resp.json()
        except ValueError:
            return None
        if isinstance(body, dict) and body.get("success") is False:
            return BusinessRejection(body.get("message") or DEFAULT_REJECTION)
        return None

    def _expect_success(self, resp: httpx.Response) -> StoreResult:
        """Разобрать { success, message } и поднять BusinessRejection при отказе"""
        try:
            result = StoreResult.model_validate(resp.json())
        except (ValueError, SchemaError) as e:
            raise FetchError(f"Некорректный ответ сервера: {e}") from e
        if not result.success:
            raise BusinessRejection(result.message or DEFAULT_REJECTION)
        return result

    def is_available(self) -> bool:
        """Проверить доступность хранилища"""
        if not self.base_url:
            return False
        try:
            self._request("get", "/categories", params={"keyword": ""})
            return True
        except Exception as e:
            logger.debug(f"Хранилище недоступно: {e}")
            return False
