"""
Клиент REST API хранилища контента.

Модуль разбит на компоненты:
- core.py - HTTP методы, connection pooling, разбор ошибок
- categories.py - дерево категорий и мутации
- tree_builder.py - построение неизменяемого снимка дерева
- uploads.py - загрузка иконок
- articles.py - статьи
- schemas.py - схемы запросов/ответов
- exceptions.py - ValidationError, FetchError, BusinessRejection
"""
from __future__ import annotations

from dataclasses import dataclass

from .articles import (
    ArticleItem,
    ArticlePage,
    ArticleParams,
    ArticleStatus,
    ArticleVisibility,
    ArticlesMixin,
    validate_article,
)
from .categories import HAS_CHILDREN_MESSAGE, CategoryTreeMixin
from .core import AdminClientCore
from .exceptions import (
    AdminClientError,
    BusinessRejection,
    FetchError,
    SubmitInProgressError,
    TreeIntegrityError,
    ValidationError,
)
from .schemas import CreateCategoryRequest, UpdateCategoryRequest
from .tree_builder import CategoryTree, build_category_tree
from .uploads import UploadsMixin

__all__ = [
    "AdminClient",
    "AdminClientError",
    "ArticleItem",
    "ArticlePage",
    "ArticleParams",
    "ArticleStatus",
    "ArticleVisibility",
    "BusinessRejection",
    "CategoryTree",
    "CreateCategoryRequest",
    "FetchError",
    "HAS_CHILDREN_MESSAGE",
    "SubmitInProgressError",
    "TreeIntegrityError",
    "UpdateCategoryRequest",
    "ValidationError",
    "build_category_tree",
    "validate_article",
]


@dataclass
class AdminClient(
    AdminClientCore,
    CategoryTreeMixin,
    UploadsMixin,
    ArticlesMixin,
):
    """
    Клиент хранилища контента.

    Композиция миксинов:
    - AdminClientCore: HTTP методы (_request, _expect_success, is_available)
    - CategoryTreeMixin: дерево категорий (load_tree, build_*_request, submit_*, delete_node)
    - UploadsMixin: иконки (upload_icon, fetch_icon)
    - ArticlesMixin: статьи (list_articles, create_article, ...)
    """
    pass
