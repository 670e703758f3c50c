"""
Конфигурация консоли администратора
Значения читаются из переменных окружения (и файла .env, если он есть)
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Настройки подключения к хранилищу контента"""

    # REST API хранилища категорий и статей
    api_base_url: str = os.getenv("ADMIN_API_BASE_URL", "http://127.0.0.1:3000/api")

    # Эндпоинт загрузки изображений (multipart)
    upload_url: str = os.getenv("ADMIN_UPLOAD_URL", "http://127.0.0.1:3000/oss/upload")
    upload_field: str = os.getenv("ADMIN_UPLOAD_FIELD", "avatar")

    # Таймаут запроса (сек) - по истечении FetchError, без ретраев
    request_timeout: float = float(os.getenv("ADMIN_REQUEST_TIMEOUT", "10"))

    # Логирование
    log_level: str = os.getenv("ADMIN_LOG_LEVEL", "INFO")
    log_dir: str = os.getenv("ADMIN_LOG_DIR", "logs")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Получить настройки (один экземпляр на процесс)"""
    return Settings()
