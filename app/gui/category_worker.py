"""Фоновый воркер для сетевых операций с категориями."""
from __future__ import annotations

import logging
import queue
from enum import Enum, auto
from typing import TYPE_CHECKING, Callable, Optional

from PySide6.QtCore import QThread, Signal

if TYPE_CHECKING:
    from app.admin_client import AdminClient
    from app.category_form import CategoryFormController, PendingSubmit

logger = logging.getLogger(__name__)

__all__ = ["CategoryWorker", "IconWorker"]


class _TaskType(Enum):
    LOAD = auto()
    SUBMIT = auto()
    DELETE = auto()
    STOP = auto()


class CategoryWorker(QThread):
    """
    Фоновый воркер для всех запросов к хранилищу категорий.

    Принимает задачи через очередь, выполняет в фоновом потоке,
    отправляет результаты через сигналы в UI-поток.
    """

    tree_loaded = Signal(object)  # CategoryTree
    load_failed = Signal(str)
    submit_finished = Signal(object, object)  # PendingSubmit, Exception | None
    delete_finished = Signal(object, object)  # node_id, Exception | None

    def __init__(
        self,
        client: "AdminClient",
        controller: "CategoryFormController",
        parent=None,
    ):
        super().__init__(parent)
        self._client = client
        self._controller = controller
        self._queue: queue.Queue = queue.Queue()
        self._running = True

    def stop(self) -> None:
        self._running = False
        self._queue.put((_TaskType.STOP, None))
        self.wait(5000)

    # === Публичные методы (вызывать из UI-потока) ===

    def _put(self, task_type: _TaskType, payload) -> None:
        self._queue.put((task_type, payload))
        if not self.isRunning():
            self.start()

    def request_load(self, keyword: Optional[str] = None) -> None:
        self._put(_TaskType.LOAD, keyword)

    def request_submit(self, pending: "PendingSubmit") -> None:
        self._put(_TaskType.SUBMIT, pending)

    def request_delete(self, node_id) -> None:
        self._put(_TaskType.DELETE, node_id)

    # === Фоновый поток ===

    def run(self) -> None:
        while self._running:
            try:
                task_type, payload = self._queue.get(timeout=1.0)
            except queue.Empty:
                continue

            if task_type == _TaskType.STOP:
                break

            if task_type == _TaskType.LOAD:
                self._do_load(payload)
            elif task_type == _TaskType.SUBMIT:
                self._do_submit(payload)
            elif task_type == _TaskType.DELETE:
                self._do_delete(payload)

    def _do_load(self, keyword: Optional[str]) -> None:
        try:
            tree = self._client.load_tree(keyword)
        except Exception as e:
            logger.error(f"CategoryWorker: загрузка дерева не удалась: {e}")
            self.load_failed.emit(str(e))
            return
        self.tree_loaded.emit(tree)

    def _do_submit(self, pending: "PendingSubmit") -> None:
        try:
            tree = self._controller.execute(pending)
        except Exception as e:
            logger.error(f"CategoryWorker: сохранение категории не удалось: {e}")
            self.submit_finished.emit(pending, e)
            return
        self.submit_finished.emit(pending, None)
        self.tree_loaded.emit(tree)

    def _do_delete(self, node_id) -> None:
        try:
            tree = self._client.delete_node(node_id)
        except Exception as e:
            logger.error(f"CategoryWorker: удаление категории {node_id} не удалось: {e}")
            self.delete_finished.emit(node_id, e)
            return
        self.delete_finished.emit(node_id, None)
        self.tree_loaded.emit(tree)


class IconWorker(QThread):
    """Разовая операция с иконкой (загрузка файла или скачивание превью)"""

    succeeded = Signal(object)
    failed = Signal(str)

    def __init__(self, job: Callable[[], object], parent=None):
        super().__init__(parent)
        self._job = job
        self.finished.connect(self.deleteLater)

    def run(self) -> None:
        try:
            result = self._job()
        except Exception as e:
            logger.error(f"IconWorker: операция с иконкой не удалась: {e}")
            self.failed.emit(str(e))
            return
        self.succeeded.emit(result)
