"""Модальный диалог создания/редактирования категории"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Set

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QPixmap
from PySide6.QtWidgets import (
    QButtonGroup,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QRadioButton,
    QSpinBox,
    QWidget,
)

from app.admin_client import SubmitInProgressError, ValidationError
from app.category_models import STATUS_NAMES, CategoryStatus
from app.gui.category_worker import IconWorker
from app.gui.dialogs.base_dialog import BaseDialog

if TYPE_CHECKING:
    from app.admin_client import AdminClient
    from app.category_form import CategoryFormController, PendingSubmit

logger = logging.getLogger(__name__)

PREVIEW_SIZE = 64


class CategoryDialog(BaseDialog):
    """Диалог категории, привязанный к CategoryFormController"""

    submit_requested = Signal(object)  # PendingSubmit

    def __init__(self, parent, controller: "CategoryFormController", client: "AdminClient"):
        super().__init__(parent, title=controller.title, min_width=420)
        self._controller = controller
        self._client = client
        self._field_widgets: Dict[str, QWidget] = {}
        self._icon_workers: Set[IconWorker] = set()
        self._setup_ui()
        self._load_fields()

    def _setup_ui(self):
        self.name_edit = QLineEdit()
        self.name_edit.setPlaceholderText("Введите название категории")
        self.add_row("Название:", self.name_edit)

        self.desc_edit = QLineEdit()
        self.desc_edit.setPlaceholderText("Введите описание категории")
        self.add_row("Описание:", self.desc_edit)

        icon_row = QWidget()
        icon_layout = QHBoxLayout(icon_row)
        icon_layout.setContentsMargins(0, 0, 0, 0)
        self.icon_preview = QLabel("нет")
        self.icon_preview.setFixedSize(PREVIEW_SIZE, PREVIEW_SIZE)
        self.icon_preview.setAlignment(Qt.AlignCenter)
        self.icon_preview.setStyleSheet("border: 1px dashed #888;")
        icon_layout.addWidget(self.icon_preview)
        self.upload_btn = QPushButton("📤 Загрузить...")
        self.upload_btn.clicked.connect(self._upload_icon)
        icon_layout.addWidget(self.upload_btn)
        icon_layout.addStretch()
        self.add_row("Иконка:", icon_row)

        self.sort_spin = QSpinBox()
        self.sort_spin.setRange(0, 1_000_000)
        self.add_row("Порядок сортировки:", self.sort_spin)

        status_row = QWidget()
        status_layout = QHBoxLayout(status_row)
        status_layout.setContentsMargins(0, 0, 0, 0)
        self.status_group = QButtonGroup(self)
        self._status_buttons: Dict[CategoryStatus, QRadioButton] = {}
        for status in CategoryStatus:
            btn = QRadioButton(STATUS_NAMES[status])
            self.status_group.addButton(btn)
            self._status_buttons[status] = btn
            status_layout.addWidget(btn)
        status_layout.addStretch()
        self.add_row("Статус:", status_row)

        self._field_widgets = {
            "name": self.name_edit,
            "description": self.desc_edit,
            "icon_url": self.icon_preview,
            "sort_order": self.sort_spin,
            "status": status_row,
        }
        self._finalize_ui()

    def _load_fields(self):
        fields = self._controller.fields
        self.name_edit.setText(fields.name)
        self.desc_edit.setText(fields.description)
        self.sort_spin.setValue(int(fields.sort_order or 0))
        self._status_buttons[CategoryStatus(fields.status)].setChecked(True)
        self._show_preview(self._controller.image_preview)

    def _collect_fields(self):
        status = next(
            (s for s, btn in self._status_buttons.items() if btn.isChecked()),
            CategoryStatus.ACTIVE,
        )
        self._controller.update_fields(
            name=self.name_edit.text(),
            description=self.desc_edit.text(),
            sort_order=self.sort_spin.value(),
            status=status,
        )

    # === Иконка ===

    def _run_icon_job(self, job, on_success, on_failure) -> IconWorker:
        """Запустить сетевую операцию с иконкой вне UI-потока"""
        # Воркер живёт у панели: диалог может закрыться раньше ответа
        worker = IconWorker(job, self.parent())
        worker.succeeded.connect(on_success)
        worker.failed.connect(on_failure)
        self._icon_workers.add(worker)
        worker.finished.connect(lambda: self._icon_workers.discard(worker))
        worker.start()
        return worker

    def _upload_icon(self):
        path, _ = QFileDialog.getOpenFileName(
            self, "Выберите иконку", "", "Images (*.png *.jpg *.jpeg)"
        )
        if not path:
            return
        try:
            self._client.check_icon_file(path)
        except ValidationError as e:
            self.show_error(str(e))
            return

        def job():
            url = self._client.upload_icon(path)
            return url, Path(path).read_bytes()

        self.upload_btn.setEnabled(False)
        self.set_busy(True)
        self._run_icon_job(job, self._on_icon_uploaded, self._on_icon_upload_failed)

    def _on_icon_uploaded(self, result):
        url, preview = result
        self.upload_btn.setEnabled(True)
        self.set_busy(self._controller.in_flight)
        if not self._controller.is_open:
            return
        self._controller.set_icon(url, preview)
        self._show_preview(preview)
        self._mark_errors()

    def _on_icon_upload_failed(self, message: str):
        self.upload_btn.setEnabled(True)
        self.set_busy(self._controller.in_flight)
        self.show_error(message)

    def _show_preview(self, preview):
        """Показать превью: bytes локального файла или URL существующей иконки"""
        if not preview:
            self.icon_preview.setPixmap(QPixmap())
            self.icon_preview.setText("нет")
            return
        if isinstance(preview, bytes):
            self._set_preview_bytes(preview)
            return
        self.icon_preview.setText("…")
        self.icon_preview.setToolTip(str(preview))
        self._run_icon_job(
            lambda: self._client.fetch_icon(preview),
            self._set_preview_bytes,
            lambda message: self._on_preview_failed(preview, message),
        )

    def _on_preview_failed(self, url: str, message: str):
        logger.warning(f"Не удалось загрузить превью иконки {url}: {message}")
        self.icon_preview.setText("?")

    def _set_preview_bytes(self, data: bytes):
        pixmap = QPixmap()
        if pixmap.loadFromData(data):
            self.icon_preview.setPixmap(
                pixmap.scaled(PREVIEW_SIZE, PREVIEW_SIZE, Qt.KeepAspectRatio, Qt.SmoothTransformation)
            )
        else:
            self.icon_preview.setText("?")

    # === Отправка ===

    def _mark_errors(self):
        errors = self._controller.field_errors
        for name, widget in self._field_widgets.items():
            if name in errors:
                widget.setStyleSheet("border: 1px solid #f44336;")
                widget.setToolTip(errors[name])
            else:
                widget.setStyleSheet("border: 1px dashed #888;" if name == "icon_url" else "")
                widget.setToolTip("")
        if errors:
            self.show_error("\n".join(errors.values()))
        else:
            self.show_error(self._controller.error_message)

    def _on_accept(self):
        self._collect_fields()
        try:
            pending = self._controller.prepare_submit()
        except ValidationError:
            self._mark_errors()
            return
        except SubmitInProgressError:
            return
        self._mark_errors()
        self.set_busy(True)
        self.submit_requested.emit(pending)

    def on_submit_finished(self, pending: "PendingSubmit") -> None:
        """Вызывается панелью после finish_submit контроллера"""
        self.set_busy(not self.upload_btn.isEnabled())
        if not self._controller.is_open:
            self.accept()
            return
        self._mark_errors()

    def reject(self):
        self._controller.cancel()
        super().reject()

    def done(self, result: int):
        # Поздние ответы воркеров иконок больше не касаются этого окна
        for worker in list(self._icon_workers):
            worker.succeeded.disconnect()
            worker.failed.disconnect()
        self._icon_workers.clear()
        super().done(result)
