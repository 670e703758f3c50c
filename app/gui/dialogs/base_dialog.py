"""Базовые классы для диалогов приложения"""
from typing import Optional

from PySide6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)


class BaseDialog(QDialog):
    """
    Базовый класс для диалогов с общей структурой:
    - Заголовок и настройка окна
    - Форма полей и строка ошибки под ней
    - Стандартные кнопки OK/Cancel с хуком _on_accept
    """

    def __init__(
        self,
        parent: Optional[QWidget] = None,
        title: str = "",
        min_width: int = 400,
        modal: bool = True,
        buttons: QDialogButtonBox.StandardButtons = QDialogButtonBox.Ok | QDialogButtonBox.Cancel
    ):
        super().__init__(parent)
        self.setWindowTitle(title)
        self.setMinimumWidth(min_width)
        self.setModal(modal)

        self._main_layout = QVBoxLayout(self)
        self._form_layout = QFormLayout()
        self._main_layout.addLayout(self._form_layout)

        self._error_label = QLabel()
        self._error_label.setStyleSheet("color: #f44336;")
        self._error_label.setWordWrap(True)
        self._error_label.hide()

        self._button_box: Optional[QDialogButtonBox] = None
        self._buttons_config = buttons

    def _finalize_ui(self) -> None:
        """
        Вызвать в конце _setup_ui для добавления строки ошибки и кнопок.
        """
        self._main_layout.addWidget(self._error_label)
        self._main_layout.addStretch()

        if self._buttons_config:
            self._button_box = QDialogButtonBox(self._buttons_config)
            self._button_box.accepted.connect(self._on_accept)
            self._button_box.rejected.connect(self.reject)
            self._main_layout.addWidget(self._button_box)

    def _on_accept(self) -> None:
        """
        Переопределить для валидации перед закрытием.
        По умолчанию просто вызывает accept().
        """
        self.accept()

    def add_row(self, label: str, widget) -> None:
        """Добавить строку формы"""
        self._form_layout.addRow(label, widget)

    def ok_button(self) -> Optional[QPushButton]:
        if self._button_box is None:
            return None
        return self._button_box.button(QDialogButtonBox.Ok)

    def set_busy(self, busy: bool) -> None:
        """Заблокировать OK на время запроса"""
        button = self.ok_button()
        if button is not None:
            button.setEnabled(not busy)

    def show_error(self, text: Optional[str]) -> None:
        """Показать/скрыть сообщение об ошибке"""
        if text:
            self._error_label.setText(text)
            self._error_label.show()
        else:
            self._error_label.clear()
            self._error_label.hide()
