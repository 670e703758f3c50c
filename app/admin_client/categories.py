"""Операции с деревом категорий."""
from __future__ import annotations

import logging
from typing import Optional

from pydantic import ValidationError as SchemaError

from app.category_models import ROOT_PARENT_ID, CategoryFields, CategoryId, FormMode

from .exceptions import BusinessRejection, FetchError, ValidationError
from .schemas import CategoryListResponse, CreateCategoryRequest, UpdateCategoryRequest
from .tree_builder import CategoryTree, build_category_tree

logger = logging.getLogger(__name__)

HAS_CHILDREN_MESSAGE = "Нельзя удалить категорию, у которой есть подкатегории"


class CategoryTreeMixin:
    """Миксин для операций с категориями"""

    _tree: Optional[CategoryTree] = None
    _keyword: Optional[str] = None

    @property
    def tree(self) -> CategoryTree:
        """Текущий снимок дерева (заменяется целиком после каждой загрузки)"""
        return self._tree if self._tree is not None else CategoryTree.empty()

    @property
    def keyword(self) -> Optional[str]:
        return self._keyword

    # === Чтение ===

    def _fetch_tree(self, keyword: Optional[str] = None) -> CategoryTree:
        params = {"keyword": keyword} if keyword else {}
        resp = self._request("get", "/categories", params=params)
        try:
            parsed = CategoryListResponse.model_validate(resp.json())
        except (ValueError, SchemaError) as e:
            logger.error(f"Некорректный список категорий: {e}")
            raise FetchError(f"Некорректный ответ сервера: {e}") from e
        return build_category_tree(parsed.records, keyword=keyword or None)

    def load_tree(self, keyword: Optional[str] = None) -> CategoryTree:
        """Загрузить дерево категорий (с фильтром по названию)"""
        keyword = (keyword or "").strip() or None
        tree = self._fetch_tree(keyword)
        self._tree = tree
        self._keyword = keyword
        logger.info(f"Загружено {len(tree)} категорий (фильтр: {keyword or '-'})")
        return tree

    def refresh_tree(self) -> CategoryTree:
        """Перезагрузить дерево с последним фильтром"""
        return self.load_tree(self._keyword)

    # === Построение запросов ===

    def build_create_request(
        self,
        mode: FormMode,
        target_parent_id: Optional[CategoryId],
        fields: CategoryFields,
    ) -> CreateCategoryRequest:
        """Тело запроса на создание; уровень берётся из текущего снимка"""
        mode = FormMode(mode)
        if mode == FormMode.CREATE_ROOT:
            parent_id, level = ROOT_PARENT_ID, 1
        elif mode == FormMode.CREATE_CHILD:
            parent = self.tree.get(target_parent_id)
            if parent is None:
                raise ValidationError(
                    {"parent_id": "Родительская категория не найдена, обновите список"}
                )
            parent_id, level = parent.id, parent.level + 1
        else:
            raise ValueError(f"Режим {mode.value} не создаёт категорию")
        return CreateCategoryRequest(parent_id=parent_id, level=level, **fields.to_payload())

    def build_update_request(
        self, node_id: CategoryId, fields: CategoryFields
    ) -> UpdateCategoryRequest:
        """Тело запроса на изменение: только содержательные поля"""
        return UpdateCategoryRequest(**fields.to_payload())

    # === Мутации ===

    def submit_create(self, request: CreateCategoryRequest) -> CategoryTree:
        """Создать категорию и перезагрузить дерево"""
        resp = self._request("post", "/categories", json=request.model_dump(mode="json"))
        self._expect_success(resp)
        logger.info(
            f"Категория '{request.category_name}' создана "
            f"(parent={request.parent_id}, level={request.level})"
        )
        return self._refresh_after_mutation()

    def submit_update(
        self, node_id: CategoryId, request: UpdateCategoryRequest
    ) -> CategoryTree:
        """Изменить категорию и перезагрузить дерево"""
        resp = self._request(
            "put", f"/categories/{node_id}", json=request.model_dump(mode="json")
        )
        self._expect_success(resp)
        logger.info(f"Категория {node_id} обновлена")
        return self._refresh_after_mutation()

    def submit_delete(self, node_id: CategoryId) -> CategoryTree:
        """Удалить категорию и перезагрузить дерево"""
        resp = self._request("delete", f"/categories/{node_id}")
        self._expect_success(resp)
        logger.info(f"Категория {node_id} удалена")
        return self._refresh_after_mutation()

    def _refresh_after_mutation(self) -> CategoryTree:
        """Перезагрузить дерево после успешной мутации"""
        try:
            return self.refresh_tree()
        except FetchError as e:
            # Мутация уже применена, показываем прежний снимок
            logger.error(f"Дерево не обновлено после изменения: {e}")
            return self.tree

    def delete_node(self, node_id: CategoryId) -> CategoryTree:
        """Удалить категорию, если у неё нет подкатегорий"""
        # Фильтр мог скрыть детей - проверяем по полному дереву
        full = self._fetch_tree(None)
        node = full.get(node_id)
        if node is None:
            raise BusinessRejection("Категория не найдена, обновите список")
        if node.has_children:
            logger.warning(
                f"Удаление категории {node_id} отклонено: {len(node.children)} подкатегорий"
            )
            raise BusinessRejection(HAS_CHILDREN_MESSAGE)
        return self.submit_delete(node_id)
