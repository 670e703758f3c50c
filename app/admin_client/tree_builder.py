"""
Построение дерева категорий из ответа хранилища.

Хранилище отдаёт список категорий плоским (parent_id) или вложенным
(children). Из него строится неизменяемый снимок CategoryTree:
- уровни вычисляются по цепочке предков (корень = 1)
- узлы, чей родитель отсутствует в ответе (фильтр по ключевому слову),
  показываются на верхнем уровне с уровнем из ответа
- цикл или дубликат id -> TreeIntegrityError, снимок не строится
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from app.category_models import CategoryId, CategoryNode, normalize_id, normalize_parent_id

from .exceptions import TreeIntegrityError
from .schemas import CategoryRecord

logger = logging.getLogger(__name__)

__all__ = ["CategoryTree", "build_category_tree"]


class CategoryTree:
    """Неизменяемый снимок леса категорий"""

    def __init__(
        self,
        roots: Tuple[CategoryNode, ...] = (),
        detached_ids: frozenset = frozenset(),
        keyword: Optional[str] = None,
    ):
        self._roots = tuple(roots)
        self._detached_ids = frozenset(detached_ids)
        self._keyword = keyword
        self._index: Dict[CategoryId, CategoryNode] = {}
        for node in self._walk(self._roots):
            self._index[node.id] = node

    @classmethod
    def empty(cls) -> "CategoryTree":
        return cls()

    @staticmethod
    def _walk(nodes: Iterable[CategoryNode]) -> Iterator[CategoryNode]:
        stack = list(reversed(tuple(nodes)))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    @property
    def roots(self) -> Tuple[CategoryNode, ...]:
        return self._roots

    @property
    def detached_ids(self) -> frozenset:
        """Узлы верхнего уровня, родитель которых не попал в ответ"""
        return self._detached_ids

    @property
    def keyword(self) -> Optional[str]:
        return self._keyword

    @property
    def max_level(self) -> int:
        return max((n.level for n in self._index.values()), default=0)

    def __iter__(self) -> Iterator[CategoryNode]:
        """Обход в прямом порядке"""
        return self._walk(self._roots)

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, node_id) -> bool:
        return normalize_id(node_id) in self._index

    def get(self, node_id: CategoryId) -> Optional[CategoryNode]:
        return self._index.get(normalize_id(node_id))

    def children_of(self, node_id: CategoryId) -> Tuple[CategoryNode, ...]:
        node = self._index.get(normalize_id(node_id))
        return node.children if node else ()

    def has_children(self, node_id: CategoryId) -> bool:
        return bool(self.children_of(node_id))

    def ancestors(self, node_id: CategoryId) -> List[CategoryNode]:
        """Предки узла от корня к родителю"""
        result = []
        node = self._index.get(normalize_id(node_id))
        while node is not None and node.parent_id is not None:
            node = self._index.get(node.parent_id)
            if node is None:
                break
            result.append(node)
        result.reverse()
        return result

    def subtree_ids(self, node_id: CategoryId) -> List[CategoryId]:
        """Id узла и всех его потомков"""
        node = self._index.get(normalize_id(node_id))
        if node is None:
            return []
        return [n.id for n in self._walk((node,))]

    def check_levels(self) -> List[str]:
        """Найти нарушения: level корня = 1, level ребёнка = level родителя + 1"""
        problems = []
        for node in self:
            if node.id in self._detached_ids:
                continue
            if node.parent_id is None:
                if node.level != 1:
                    problems.append(f"{node.id}: корень с level={node.level}")
                continue
            parent = self._index.get(node.parent_id)
            if parent is None:
                problems.append(f"{node.id}: родитель {node.parent_id} отсутствует")
            elif node.level != parent.level + 1:
                problems.append(
                    f"{node.id}: level={node.level}, у родителя {parent.level}"
                )
        return problems


def _flatten(
    records: Iterable[CategoryRecord],
) -> List[Tuple[CategoryRecord, Optional[CategoryId]]]:
    """Развернуть вложенный ответ в пары (запись, parent_id)"""
    flat = []
    stack = [(r, normalize_parent_id(r.parent_id)) for r in reversed(list(records))]
    while stack:
        record, parent_id = stack.pop()
        flat.append((record, parent_id))
        for child in reversed(record.children or []):
            # Вложенность главнее поля parent_id
            stack.append((child, record.id))
    return flat


def build_category_tree(
    records: Iterable[CategoryRecord], keyword: Optional[str] = None
) -> CategoryTree:
    """Построить снимок дерева из записей хранилища"""
    flat = _flatten(records)

    by_id: Dict[CategoryId, Tuple[CategoryRecord, Optional[CategoryId]]] = {}
    order: List[CategoryId] = []
    for record, parent_id in flat:
        if record.id in by_id:
            raise TreeIntegrityError(f"Дубликат категории id={record.id} в ответе")
        by_id[record.id] = (record, parent_id)
        order.append(record.id)

    children_ids: Dict[CategoryId, List[CategoryId]] = {}
    top_ids: List[CategoryId] = []
    detached = set()
    for node_id in order:
        _, parent_id = by_id[node_id]
        if parent_id == node_id:
            raise TreeIntegrityError(f"Категория {node_id} ссылается на себя")
        if parent_id is None:
            top_ids.append(node_id)
        elif parent_id in by_id:
            children_ids.setdefault(parent_id, []).append(node_id)
        else:
            top_ids.append(node_id)
            detached.add(node_id)

    reached = set()

    def make(node_id: CategoryId, level: int) -> CategoryNode:
        reached.add(node_id)
        record, parent_id = by_id[node_id]
        if record.level is not None and record.level != level and node_id not in detached:
            logger.warning(
                f"Категория {node_id}: level={record.level} из ответа "
                f"не совпадает с вычисленным {level}, используем {level}"
            )
        kids = sorted(children_ids.get(node_id, []), key=lambda cid: by_id[cid][0].sort_order)
        return CategoryNode(
            id=node_id,
            parent_id=parent_id,
            level=level,
            name=record.category_name,
            description=record.description or "",
            icon_url=record.icon_url or "",
            sort_order=record.sort_order,
            status=record.status,
            updated_at=record.updated_at,
            children=tuple(make(cid, level + 1) for cid in kids),
        )

    roots = []
    for node_id in sorted(top_ids, key=lambda nid: by_id[nid][0].sort_order):
        if node_id in detached:
            start_level = by_id[node_id][0].level or 1
        else:
            start_level = 1
        roots.append(make(node_id, start_level))

    # Узлы, не достижимые от верхнего уровня, замкнуты в цикл
    unreached = [nid for nid in order if nid not in reached]
    if unreached:
        raise TreeIntegrityError(
            f"Цикл в иерархии категорий: {', '.join(str(n) for n in unreached)}"
        )

    if detached:
        logger.debug(f"Категории без родителя в ответе: {sorted(map(str, detached))}")

    return CategoryTree(tuple(roots), frozenset(detached), keyword)
