"""Модели данных для дерева категорий"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

CategoryId = Union[int, str]

# Хранилище обозначает "нет родителя" нулём
ROOT_PARENT_ID = 0
_ROOT_MARKERS = (None, 0, "0", "")


class CategoryStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


STATUS_NAMES = {
    CategoryStatus.ACTIVE: "Включена",
    CategoryStatus.INACTIVE: "Отключена",
}


class FormMode(str, Enum):
    """Режим модального окна категории"""

    CREATE_ROOT = "create_root"
    CREATE_CHILD = "create_child"
    EDIT = "edit"


def normalize_id(value: Any) -> Any:
    """Привести id к одному типу: числовые строки -> int"""
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return value


def normalize_parent_id(value: Any) -> Optional[CategoryId]:
    """Привести parent_id из ответа хранилища: корневые маркеры -> None"""
    value = normalize_id(value)
    if value in _ROOT_MARKERS:
        return None
    return value


@dataclass(frozen=True)
class CategoryFields:
    """Редактируемые поля категории"""

    name: str = ""
    description: str = ""
    icon_url: str = ""
    sort_order: int = 0
    status: CategoryStatus = CategoryStatus.ACTIVE

    def replace(self, **changes) -> "CategoryFields":
        return replace(self, **changes)

    def to_payload(self) -> Dict[str, Any]:
        """Поля в формате хранилища"""
        return {
            "category_name": self.name,
            "description": self.description,
            "icon_url": self.icon_url,
            "sort_order": self.sort_order,
            "status": CategoryStatus(self.status).value,
        }


@dataclass(frozen=True)
class CategoryNode:
    """Узел дерева категорий (неизменяемый снимок)"""

    id: CategoryId
    parent_id: Optional[CategoryId]
    level: int
    name: str
    description: str = ""
    icon_url: str = ""
    sort_order: int = 0
    status: CategoryStatus = CategoryStatus.ACTIVE
    updated_at: Optional[str] = None
    children: Tuple["CategoryNode", ...] = field(default_factory=tuple)

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    def fields(self) -> CategoryFields:
        """Содержательные поля узла (для предзаполнения формы)"""
        return CategoryFields(
            name=self.name,
            description=self.description,
            icon_url=self.icon_url,
            sort_order=self.sort_order,
            status=self.status,
        )
