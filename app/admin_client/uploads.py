"""Загрузка иконок категорий во внешнее хранилище файлов."""
from __future__ import annotations

import logging
import mimetypes
from pathlib import Path
from typing import Union

from pydantic import ValidationError as SchemaError

from app.config import get_settings

from .exceptions import FetchError, ValidationError
from .schemas import UploadResponse

logger = logging.getLogger(__name__)

ALLOWED_ICON_TYPES = ("image/jpeg", "image/png")
MAX_ICON_SIZE = 2 * 1024 * 1024  # 2 MB


class UploadsMixin:
    """Миксин для загрузки изображений"""

    def check_icon_file(self, path: Union[str, Path]) -> str:
        """Проверить файл иконки до загрузки, вернуть mime-тип"""
        path = Path(path)
        mime_type, _ = mimetypes.guess_type(path.name)
        if mime_type not in ALLOWED_ICON_TYPES:
            raise ValidationError({"icon_url": "Можно загрузить только JPG/PNG файл"})
        if not path.is_file():
            raise ValidationError({"icon_url": f"Файл не найден: {path}"})
        if path.stat().st_size >= MAX_ICON_SIZE:
            raise ValidationError({"icon_url": "Изображение должно быть меньше 2 МБ"})
        return mime_type

    def upload_icon(self, path: Union[str, Path]) -> str:
        """Загрузить иконку, вернуть её URL"""
        path = Path(path)
        mime_type = self.check_icon_file(path)
        settings = get_settings()

        with open(path, "rb") as f:
            files = {settings.upload_field: (path.name, f, mime_type)}
            resp = self._send("post", settings.upload_url, files=files, headers={})

        try:
            url = UploadResponse.model_validate(resp.json()).data.url
        except (ValueError, SchemaError) as e:
            logger.error(f"Некорректный ответ загрузки {path.name}: {e}")
            raise FetchError(f"Некорректный ответ сервера загрузки: {e}") from e

        logger.info(f"Иконка {path.name} загружена: {url}")
        return url

    def fetch_icon(self, url: str) -> bytes:
        """Скачать существующую иконку для превью"""
        resp = self._send("get", url, headers={})
        return resp.content
