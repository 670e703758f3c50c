"""
Главное окно приложения
Дерево категорий и меню
"""

import logging

from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import QLabel, QMainWindow, QMessageBox, QStatusBar

from _metadata import get_about_text, get_version_info
from app.admin_client import AdminClient
from app.gui.category_panel import CategoryPanel

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """Главное окно консоли администратора"""

    def __init__(self, client: AdminClient = None):
        super().__init__()
        self.client = client or AdminClient()

        self.category_panel = CategoryPanel(self, self.client)
        self.setCentralWidget(self.category_panel)

        self._setup_menu()
        self._setup_status_bar()

        self.setWindowTitle(get_version_info())
        self.resize(1100, 700)

    def _setup_menu(self):
        """Настройка меню"""
        menubar = self.menuBar()

        file_menu = menubar.addMenu("&Файл")

        refresh_action = QAction("🔄 &Обновить", self)
        refresh_action.setShortcut(QKeySequence.Refresh)
        refresh_action.triggered.connect(self.category_panel.reload)
        file_menu.addAction(refresh_action)

        add_root_action = QAction("➕ Новая корневая категория", self)
        add_root_action.setShortcut(QKeySequence.New)
        add_root_action.triggered.connect(self.category_panel.open_create_root)
        file_menu.addAction(add_root_action)

        file_menu.addSeparator()

        exit_action = QAction("&Выход", self)
        exit_action.setShortcut(QKeySequence.Quit)
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

        help_menu = menubar.addMenu("&Справка")
        about_action = QAction("О программе", self)
        about_action.triggered.connect(
            lambda: QMessageBox.about(self, "О программе", get_about_text())
        )
        help_menu.addAction(about_action)

    def _setup_status_bar(self):
        status_bar = QStatusBar(self)
        self.setStatusBar(status_bar)
        self._server_label = QLabel(f"Сервер: {self.client.base_url}")
        status_bar.addPermanentWidget(self._server_label)

    def closeEvent(self, event):
        """Обработка закрытия окна"""
        self.category_panel.shutdown()
        event.accept()
