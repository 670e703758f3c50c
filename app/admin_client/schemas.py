"""Схемы запросов и ответов REST API хранилища"""
from __future__ import annotations

import logging
from typing import Any, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from app.category_models import CategoryStatus, normalize_id

logger = logging.getLogger(__name__)


# === Категории ===

class CategoryRecord(BaseModel):
    """Категория в ответе GET /categories (плоская или вложенная)"""

    model_config = ConfigDict(extra="ignore")

    id: Union[int, str] = Field(validation_alias=AliasChoices("category_id", "id"))
    parent_id: Optional[Union[int, str]] = None
    level: Optional[int] = None
    category_name: str = ""
    description: Optional[str] = ""
    icon_url: Optional[str] = ""
    sort_order: int = 0
    status: CategoryStatus = CategoryStatus.ACTIVE
    updated_at: Optional[str] = None
    children: Optional[List["CategoryRecord"]] = None

    @field_validator("id", "parent_id", mode="before")
    @classmethod
    def _same_id_type(cls, value: Any) -> Any:
        # "12" и 12 - одна категория
        return normalize_id(value)

    @field_validator("category_name", "description", "icon_url", mode="before")
    @classmethod
    def _null_text(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("level", mode="before")
    @classmethod
    def _loose_level(cls, value: Any) -> Any:
        try:
            return int(value) if value not in (None, "") else None
        except (TypeError, ValueError):
            logger.warning(f"Некорректный level категории: {value!r}")
            return None

    @field_validator("sort_order", mode="before")
    @classmethod
    def _loose_sort_order(cls, value: Any) -> Any:
        # Хранилище иногда отдаёт пустую строку
        if value in (None, ""):
            return 0
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning(f"Некорректный sort_order категории: {value!r}, используем 0")
            return 0

    @field_validator("status", mode="before")
    @classmethod
    def _known_status(cls, value: Any) -> Any:
        try:
            return CategoryStatus(value)
        except ValueError:
            logger.warning(
                f"Неизвестный статус категории: {value!r}, используем {CategoryStatus.ACTIVE.value}"
            )
            return CategoryStatus.ACTIVE


class CategoryListData(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    items: List[CategoryRecord] = Field(default_factory=list, alias="list")


class CategoryListResponse(BaseModel):
    """Ответ GET /categories: { data: { list: [...] } }"""

    model_config = ConfigDict(extra="ignore")

    data: Optional[CategoryListData] = None

    @property
    def records(self) -> List[CategoryRecord]:
        return self.data.items if self.data else []


class CategoryContent(BaseModel):
    """Содержательные поля категории"""

    model_config = ConfigDict(extra="forbid")

    category_name: str
    description: str
    icon_url: str
    sort_order: int
    status: CategoryStatus


class CreateCategoryRequest(CategoryContent):
    """Тело POST /categories"""

    parent_id: Union[int, str]
    level: int = Field(ge=1)


class UpdateCategoryRequest(CategoryContent):
    """Тело PUT /categories/{id} - без parent_id и level"""

    pass


class StoreResult(BaseModel):
    """Ответ мутаций: { success, message? }"""

    model_config = ConfigDict(extra="ignore")

    success: bool = False
    message: Optional[str] = None


# === Загрузка изображений ===

class UploadData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    url: str


class UploadResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    data: UploadData
