"""
Контроллер модального окна категории.

Конечный автомат: Closed <-> OpenSession(mode, ...).
Каждое открытие строит контекст заново, поэтому уровень/родитель
от предыдущего "добавить подкатегорию" не попадает в "добавить корневую".
Ответ хранилища, пришедший после закрытия окна, отбрасывается по
номеру поколения (generation).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Dict, Optional, Union

from app.admin_client.exceptions import (
    AdminClientError,
    SubmitInProgressError,
    ValidationError,
)
from app.admin_client.schemas import CreateCategoryRequest, UpdateCategoryRequest
from app.category_models import CategoryFields, CategoryId, CategoryNode, CategoryStatus, FormMode

if TYPE_CHECKING:
    from app.admin_client import AdminClient, CategoryTree

logger = logging.getLogger(__name__)

__all__ = ["Closed", "OpenSession", "PendingSubmit", "CategoryFormController"]

MODE_TITLES = {
    FormMode.CREATE_ROOT: "Добавить корневую категорию",
    FormMode.CREATE_CHILD: "Добавить подкатегорию",
    FormMode.EDIT: "Редактировать категорию",
}

FIELD_LABELS = {
    "name": "Название",
    "description": "Описание",
    "icon_url": "Иконка",
    "sort_order": "Порядок сортировки",
    "status": "Статус",
}


@dataclass(frozen=True)
class Closed:
    """Окно закрыто"""

    generation: int = 0


@dataclass(frozen=True)
class OpenSession:
    """Окно открыто в одном из режимов"""

    mode: FormMode
    generation: int
    target_parent_id: Optional[CategoryId] = None
    target_level: int = 1
    editing_node_id: Optional[CategoryId] = None
    fields: CategoryFields = field(default_factory=CategoryFields)
    in_flight: bool = False


@dataclass(frozen=True)
class PendingSubmit:
    """Отправка, ожидающая ответа хранилища"""

    generation: int
    mode: FormMode
    request: Union[CreateCategoryRequest, UpdateCategoryRequest]
    node_id: Optional[CategoryId] = None


class CategoryFormController:
    """Состояние модального окна категории"""

    def __init__(self, client: "AdminClient"):
        self._client = client
        self._state: Union[Closed, OpenSession] = Closed()
        self._generation = 0
        self.image_preview: Optional[Union[str, bytes]] = None
        self.error_message: Optional[str] = None
        self.field_errors: Dict[str, str] = {}

    # === Состояние ===

    @property
    def state(self) -> Union[Closed, OpenSession]:
        return self._state

    @property
    def is_open(self) -> bool:
        return isinstance(self._state, OpenSession)

    @property
    def mode(self) -> Optional[FormMode]:
        return self._state.mode if self.is_open else None

    @property
    def in_flight(self) -> bool:
        return self.is_open and self._state.in_flight

    @property
    def fields(self) -> CategoryFields:
        return self._state.fields if self.is_open else CategoryFields()

    @property
    def title(self) -> str:
        return MODE_TITLES.get(self.mode, "")

    @property
    def target_parent_id(self) -> Optional[CategoryId]:
        return self._state.target_parent_id if self.is_open else None

    @property
    def target_level(self) -> int:
        return self._state.target_level if self.is_open else 1

    # === Переходы ===

    def _open(self, **context) -> OpenSession:
        if self.is_open:
            logger.debug(f"Окно уже открыто ({self.mode.value}), сессия заменяется")
        self._generation += 1
        self._reset_side_state()
        self._state = OpenSession(generation=self._generation, **context)
        logger.debug(f"Открыто окно категории: {self._state.mode.value}")
        return self._state

    def open_create_root(self) -> OpenSession:
        return self._open(mode=FormMode.CREATE_ROOT, target_parent_id=None, target_level=1)

    def open_create_child(self, node: CategoryNode) -> OpenSession:
        return self._open(
            mode=FormMode.CREATE_CHILD,
            target_parent_id=node.id,
            target_level=node.level + 1,
        )

    def open_edit(self, node: CategoryNode) -> OpenSession:
        session = self._open(
            mode=FormMode.EDIT,
            editing_node_id=node.id,
            fields=node.fields(),
        )
        # Превью показывает текущую иконку
        self.image_preview = node.icon_url or None
        return session

    def cancel(self) -> None:
        """Закрыть окно без сохранения"""
        if self.is_open:
            logger.debug(f"Окно категории закрыто без сохранения ({self.mode.value})")
        self._close()

    def _close(self) -> None:
        self._generation += 1
        self._state = Closed(generation=self._generation)
        self._reset_side_state()

    def _reset_side_state(self) -> None:
        self.image_preview = None
        self.error_message = None
        self.field_errors = {}

    # === Поля ===

    def _require_open(self) -> OpenSession:
        if not self.is_open:
            raise RuntimeError("Окно категории закрыто")
        return self._state

    def update_fields(self, **changes) -> CategoryFields:
        session = self._require_open()
        fields = session.fields.replace(**changes)
        self._state = replace(session, fields=fields)
        for name in changes:
            self.field_errors.pop(name, None)
        return fields

    def set_icon(self, url: str, preview: Optional[Union[str, bytes]] = None) -> None:
        """Запомнить загруженную иконку и её превью"""
        self.update_fields(icon_url=url)
        self.image_preview = preview if preview is not None else url

    @staticmethod
    def validate(fields: CategoryFields) -> CategoryFields:
        """Проверить поля формы, вернуть нормализованные"""
        errors: Dict[str, str] = {}
        for name in ("name", "description", "icon_url"):
            if not str(getattr(fields, name) or "").strip():
                errors[name] = f"Поле «{FIELD_LABELS[name]}» обязательно"

        sort_order = fields.sort_order
        try:
            sort_order = int(str(sort_order).strip())
            if sort_order < 0:
                errors["sort_order"] = "Порядок сортировки не может быть отрицательным"
        except (TypeError, ValueError):
            errors["sort_order"] = "Порядок сортировки должен быть целым числом"

        status = fields.status
        try:
            status = CategoryStatus(status)
        except ValueError:
            errors["status"] = f"Поле «{FIELD_LABELS['status']}» обязательно"

        if errors:
            raise ValidationError(errors)
        return fields.replace(
            name=fields.name.strip(),
            description=fields.description.strip(),
            icon_url=fields.icon_url.strip(),
            sort_order=sort_order,
            status=status,
        )

    # === Отправка ===

    def prepare_submit(self) -> PendingSubmit:
        """Проверить поля и собрать запрос; окно помечается как ожидающее ответа"""
        session = self._require_open()
        if session.in_flight:
            raise SubmitInProgressError("Отправка уже выполняется")

        try:
            fields = self.validate(session.fields)
            if session.mode == FormMode.EDIT:
                request = self._client.build_update_request(session.editing_node_id, fields)
            else:
                request = self._client.build_create_request(
                    session.mode, session.target_parent_id, fields
                )
        except ValidationError as e:
            self.field_errors = dict(e.errors)
            logger.debug(f"Форма категории не прошла проверку: {e.errors}")
            raise

        self.field_errors = {}
        self.error_message = None
        self._state = replace(session, in_flight=True)
        return PendingSubmit(
            generation=session.generation,
            mode=session.mode,
            request=request,
            node_id=session.editing_node_id,
        )

    def execute(self, pending: PendingSubmit) -> "CategoryTree":
        """Выполнить запрос к хранилищу (можно вызывать из фонового потока)"""
        if pending.mode == FormMode.EDIT:
            return self._client.submit_update(pending.node_id, pending.request)
        return self._client.submit_create(pending.request)

    def is_current(self, pending: PendingSubmit) -> bool:
        return self.is_open and self._state.generation == pending.generation

    def finish_submit(
        self, pending: PendingSubmit, error: Optional[BaseException] = None
    ) -> bool:
        """
        Применить результат отправки.

        Returns:
            False если окно уже закрыто/переоткрыто и ответ отброшен
        """
        if not self.is_current(pending):
            logger.debug(f"Ответ для поколения {pending.generation} отброшен")
            return False

        if error is None:
            logger.info(f"Категория сохранена ({pending.mode.value})")
            self._close()
            return True

        # Окно остаётся открытым, введённые поля сохраняются
        self._state = replace(self._state, in_flight=False)
        self.error_message = str(error)
        if isinstance(error, ValidationError):
            self.field_errors = dict(error.errors)
        logger.warning(f"Категория не сохранена: {error}")
        return True

    def submit(self) -> bool:
        """Синхронная отправка: True если окно закрыто после успеха"""
        pending = self.prepare_submit()
        try:
            self.execute(pending)
        except AdminClientError as e:
            self.finish_submit(pending, e)
            return False
        self.finish_submit(pending)
        return not self.is_open
