"""Панель дерева категорий: таблица, поиск и действия над строками"""
from __future__ import annotations

import logging
from typing import Optional, Set

from PySide6.QtCore import Qt, QTimer
from PySide6.QtGui import QColor
from PySide6.QtWidgets import (
    QAbstractItemView,
    QHBoxLayout,
    QLineEdit,
    QMenu,
    QMessageBox,
    QPushButton,
    QTreeWidget,
    QTreeWidgetItem,
    QVBoxLayout,
    QWidget,
)

from app.admin_client import AdminClient, CategoryTree
from app.category_form import CategoryFormController, PendingSubmit
from app.category_models import STATUS_NAMES, CategoryNode, CategoryStatus
from app.gui.category_dialog import CategoryDialog
from app.gui.category_worker import CategoryWorker
from app.gui.toast import show_toast

logger = logging.getLogger(__name__)

__all__ = ["CategoryPanel"]

COLUMNS = ["Название", "Описание", "Иконка", "Статус", "Уровень", "Обновлено"]

STATUS_COLORS = {
    CategoryStatus.ACTIVE: "#4caf50",
    CategoryStatus.INACTIVE: "#e91e63",
}


class CategoryPanel(QWidget):
    """Список категорий в виде дерева"""

    def __init__(self, parent=None, client: Optional[AdminClient] = None):
        super().__init__(parent)
        self.client = client or AdminClient()
        self.controller = CategoryFormController(self.client)
        self._dialog: Optional[CategoryDialog] = None
        self._deleting: Set = set()

        self._worker = CategoryWorker(self.client, self.controller, self)
        self._worker.tree_loaded.connect(self._on_tree_loaded)
        self._worker.load_failed.connect(self._on_load_failed)
        self._worker.submit_finished.connect(self._on_submit_finished)
        self._worker.delete_finished.connect(self._on_delete_finished)

        self._setup_ui()
        QTimer.singleShot(100, self.reload)

    def _setup_ui(self):
        layout = QVBoxLayout(self)

        header = QHBoxLayout()
        self.add_root_btn = QPushButton("➕ Добавить корневую категорию")
        self.add_root_btn.clicked.connect(self.open_create_root)
        header.addWidget(self.add_root_btn)

        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText("Поиск по названию...")
        self.search_input.setClearButtonEnabled(True)
        self.search_input.setMaximumWidth(260)
        self.search_input.returnPressed.connect(self.reload)
        self.search_input.textChanged.connect(self._on_search_text_changed)
        header.addWidget(self.search_input)
        header.addStretch()

        self.add_child_btn = QPushButton("Добавить подкатегорию")
        self.add_child_btn.clicked.connect(lambda: self._with_selected(self.open_create_child))
        self.edit_btn = QPushButton("Редактировать")
        self.edit_btn.clicked.connect(lambda: self._with_selected(self.open_edit))
        self.delete_btn = QPushButton("🗑️ Удалить")
        self.delete_btn.clicked.connect(lambda: self._with_selected(self.confirm_delete))
        for btn in (self.add_child_btn, self.edit_btn, self.delete_btn):
            header.addWidget(btn)
        layout.addLayout(header)

        self.tree = QTreeWidget()
        self.tree.setColumnCount(len(COLUMNS))
        self.tree.setHeaderLabels(COLUMNS)
        self.tree.setSelectionMode(QAbstractItemView.SingleSelection)
        self.tree.setContextMenuPolicy(Qt.CustomContextMenu)
        self.tree.customContextMenuRequested.connect(self._show_context_menu)
        self.tree.itemDoubleClicked.connect(lambda item, _col: self._edit_item(item))
        self.tree.itemSelectionChanged.connect(self._update_buttons)
        layout.addWidget(self.tree)

        self._update_buttons()

    # === Загрузка ===

    def reload(self):
        """Перезагрузить дерево с текущим фильтром"""
        self.tree.setDisabled(True)
        self._worker.request_load(self.search_input.text())

    def _on_search_text_changed(self, text: str):
        # Очистка поиска кнопкой - сразу полный список
        if not text:
            self.reload()

    def _on_tree_loaded(self, tree: CategoryTree):
        self.tree.setDisabled(False)
        self._render(tree)

    def _on_load_failed(self, message: str):
        self.tree.setDisabled(False)
        self.tree.clear()
        self._update_buttons()
        show_toast(self.window(), f"Не удалось загрузить категории: {message}", 4000, "error")

    def _render(self, tree: CategoryTree):
        selected = self._selected_node()
        self.tree.clear()
        for root in tree.roots:
            self.tree.addTopLevelItem(self._create_item(root))
        self.tree.expandAll()
        for i in range(len(COLUMNS)):
            self.tree.resizeColumnToContents(i)
        if selected is not None:
            self._select(selected.id)
        self._update_buttons()
        logger.debug(f"Отрисовано {len(tree)} категорий")

    def _create_item(self, node: CategoryNode) -> QTreeWidgetItem:
        item = QTreeWidgetItem([
            node.name,
            node.description,
            "🖼" if node.icon_url else "",
            STATUS_NAMES.get(node.status, str(node.status)),
            str(node.level),
            node.updated_at or "",
        ])
        item.setData(0, Qt.UserRole, node)
        item.setToolTip(2, node.icon_url)
        item.setForeground(3, QColor(STATUS_COLORS.get(node.status, "#e0e0e0")))
        for child in node.children:
            item.addChild(self._create_item(child))
        return item

    def _select(self, node_id):
        it = self.tree.invisibleRootItem()
        stack = [it.child(i) for i in range(it.childCount())]
        while stack:
            item = stack.pop()
            node = item.data(0, Qt.UserRole)
            if isinstance(node, CategoryNode) and node.id == node_id:
                self.tree.setCurrentItem(item)
                return
            stack.extend(item.child(i) for i in range(item.childCount()))

    # === Выбор строки ===

    def _selected_node(self) -> Optional[CategoryNode]:
        item = self.tree.currentItem()
        node = item.data(0, Qt.UserRole) if item else None
        return node if isinstance(node, CategoryNode) else None

    def _with_selected(self, action):
        node = self._selected_node()
        if node is not None:
            action(node)

    def _edit_item(self, item: QTreeWidgetItem):
        node = item.data(0, Qt.UserRole)
        if isinstance(node, CategoryNode):
            self.open_edit(node)

    def _update_buttons(self):
        node = self._selected_node()
        self.add_child_btn.setEnabled(node is not None)
        self.edit_btn.setEnabled(node is not None)
        self.delete_btn.setEnabled(node is not None and node.id not in self._deleting)

    def _show_context_menu(self, pos):
        item = self.tree.itemAt(pos)
        menu = QMenu(self)
        node = item.data(0, Qt.UserRole) if item else None
        if isinstance(node, CategoryNode):
            menu.addAction("➕ Добавить подкатегорию").setData(("add_child", node))
            menu.addAction("✏️ Редактировать").setData(("edit", node))
            delete_action = menu.addAction("🗑️ Удалить")
            delete_action.setData(("delete", node))
            delete_action.setEnabled(node.id not in self._deleting)
            menu.addSeparator()
        menu.addAction("➕ Добавить корневую категорию").setData(("add_root", None))
        menu.addAction("🔄 Обновить").setData(("reload", None))

        action = menu.exec_(self.tree.viewport().mapToGlobal(pos))
        if not action or not action.data():
            return
        kind, target = action.data()
        handlers = {
            "add_child": lambda: self.open_create_child(target),
            "edit": lambda: self.open_edit(target),
            "delete": lambda: self.confirm_delete(target),
            "add_root": self.open_create_root,
            "reload": self.reload,
        }
        handlers[kind]()

    # === Окно категории ===

    def open_create_root(self):
        self.controller.open_create_root()
        self._show_dialog()

    def open_create_child(self, node: CategoryNode):
        self.controller.open_create_child(node)
        self._show_dialog()

    def open_edit(self, node: CategoryNode):
        self.controller.open_edit(node)
        self._show_dialog()

    def _show_dialog(self):
        # Окно одно на процесс: прежнее закрывается без отмены новой сессии
        if self._dialog is not None:
            self._dialog.blockSignals(True)
            self._dialog.done(0)
            self._dialog.deleteLater()
        self._dialog = CategoryDialog(self, self.controller, self.client)
        self._dialog.submit_requested.connect(self._worker.request_submit)
        self._dialog.finished.connect(self._on_dialog_finished)
        self._dialog.open()

    def _on_dialog_finished(self, _result: int):
        dialog = self.sender()
        if dialog is self._dialog:
            self._dialog = None
            dialog.deleteLater()

    def _on_submit_finished(self, pending: PendingSubmit, error: Optional[Exception]):
        applied = self.controller.finish_submit(pending, error)
        if not applied:
            return
        if error is None:
            show_toast(self.window(), "Категория сохранена")
        if self._dialog is not None:
            self._dialog.on_submit_finished(pending)

    # === Удаление ===

    def confirm_delete(self, node: CategoryNode):
        if node.id in self._deleting:
            return
        reply = QMessageBox.question(
            self, "Удаление категории", f"Удалить категорию «{node.name}»?",
            QMessageBox.Yes | QMessageBox.No, QMessageBox.No,
        )
        if reply != QMessageBox.Yes:
            return
        self._deleting.add(node.id)
        self._update_buttons()
        self._worker.request_delete(node.id)

    def _on_delete_finished(self, node_id, error: Optional[Exception]):
        self._deleting.discard(node_id)
        self._update_buttons()
        if error is None:
            show_toast(self.window(), "Категория удалена")
        else:
            show_toast(self.window(), str(error), 4000, "error")

    def shutdown(self):
        """Остановить фоновый воркер"""
        self._worker.stop()
