"""Операции со статьями (REST /articles)."""
from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as SchemaError

from .exceptions import FetchError, ValidationError

logger = logging.getLogger(__name__)

ArticleId = Union[int, str]

SUMMARY_MAX_LENGTH = 200

_TAG_RE = re.compile(r"<[^>]+>")
_BLANK_RE = re.compile(r"&nbsp;|\s")


class ArticleStatus(str, Enum):
    DRAFT = "draft"
    PENDING_REVIEW = "pending_review"
    PUBLISHED = "published"
    REJECTED = "rejected"
    ARCHIVED = "archived"


class ArticleVisibility(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    PASSWORD_PROTECTED = "password_protected"


class ArticleParams(BaseModel):
    """Тело POST/PUT /articles"""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    subtitle: str = ""
    cover_image_url: str = Field("", alias="coverImageUrl")
    content: str = ""
    summary: str = ""
    author_id: int = Field(1, alias="authorId")
    status: ArticleStatus = ArticleStatus.DRAFT
    visibility: ArticleVisibility = ArticleVisibility.PUBLIC
    is_featured: int = Field(0, alias="isFeatured")
    resource_url: str = Field("", alias="resourceUrl")
    download_point_threshold: int = Field(0, alias="downloadPointThreshold")

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ArticleItem(BaseModel):
    """Статья в списке GET /articles"""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: ArticleId
    title: str = ""
    subtitle: str = ""
    summary: str = ""
    status: str = ArticleStatus.DRAFT.value
    visibility: str = ArticleVisibility.PUBLIC.value
    is_featured: int = Field(0, alias="isFeatured")
    point_threshold: int = Field(0, alias="pointThreshold")
    created_at: Optional[str] = Field(None, alias="createdAt")
    updated_at: Optional[str] = Field(None, alias="updatedAt")


class ArticlePage(BaseModel):
    """Страница списка статей: { data: [...], total, success }"""

    model_config = ConfigDict(extra="ignore")

    data: List[ArticleItem] = Field(default_factory=list)
    total: int = 0
    success: bool = True


def is_blank_html(content: Optional[str]) -> bool:
    """Пустой ли HTML редактора (только теги, пробелы и &nbsp;)"""
    if not content:
        return True
    return _BLANK_RE.sub("", _TAG_RE.sub("", content)) == ""


def validate_article(params: ArticleParams) -> ArticleParams:
    """Проверить поля статьи перед отправкой"""
    errors: Dict[str, str] = {}
    required = {
        "title": "Заголовок",
        "subtitle": "Подзаголовок",
        "cover_image_url": "Обложка",
        "summary": "Краткое описание",
        "resource_url": "Адрес ресурса",
    }
    for name, label in required.items():
        if not str(getattr(params, name) or "").strip():
            errors[name] = f"Поле «{label}» обязательно"

    if not params.content:
        errors["content"] = "Введите содержимое"
    elif is_blank_html(params.content):
        errors["content"] = "Содержимое не может состоять только из пробелов"

    if len(params.summary) > SUMMARY_MAX_LENGTH:
        errors["summary"] = f"Краткое описание длиннее {SUMMARY_MAX_LENGTH} символов"
    if params.download_point_threshold < 0:
        errors["download_point_threshold"] = "Баллы для скачивания не могут быть отрицательными"

    if errors:
        raise ValidationError(errors)
    return params


class ArticlesMixin:
    """Миксин для операций со статьями"""

    def list_articles(self, current: int = 1, page_size: int = 20, **filters) -> ArticlePage:
        """Получить страницу статей"""
        params = {"current": current, "pageSize": page_size}
        params.update({k: v for k, v in filters.items() if v not in (None, "")})
        resp = self._request("get", "/articles", params=params)
        try:
            return ArticlePage.model_validate(resp.json())
        except (ValueError, SchemaError) as e:
            raise FetchError(f"Некорректный список статей: {e}") from e

    def get_article(self, article_id: ArticleId) -> Dict[str, Any]:
        """Получить статью по ID"""
        resp = self._request("get", f"/articles/{article_id}")
        try:
            body = resp.json()
        except ValueError as e:
            raise FetchError(f"Некорректный ответ сервера: {e}") from e
        if body is None:
            return {}
        if not isinstance(body, dict):
            raise FetchError(
                f"Некорректный ответ сервера: ожидался объект, получен {type(body).__name__}"
            )
        return body.get("data") or {}

    def create_article(self, params: ArticleParams) -> None:
        """Опубликовать статью"""
        validate_article(params)
        resp = self._request("post", "/articles", json=params.to_payload())
        self._expect_success(resp)
        logger.info(f"Статья '{params.title}' создана")

    def update_article(self, article_id: ArticleId, params: ArticleParams) -> None:
        """Изменить статью"""
        validate_article(params)
        resp = self._request("put", f"/articles/{article_id}", json=params.to_payload())
        self._expect_success(resp)
        logger.info(f"Статья {article_id} обновлена")

    def delete_article(self, article_id: ArticleId) -> None:
        """Удалить статью"""
        resp = self._request("delete", f"/articles/{article_id}")
        self._expect_success(resp)
        logger.info(f"Статья {article_id} удалена")

    def delete_articles(self, article_ids: Iterable[ArticleId]) -> int:
        """Удалить несколько статей по очереди; первая ошибка прерывает удаление"""
        deleted = 0
        for article_id in article_ids:
            self.delete_article(article_id)
            deleted += 1
        return deleted
