"""
Точка входа приложения
Запуск консоли администратора
"""

import sys
import logging

from PySide6.QtWidgets import QApplication

from app.admin_client import AdminClient
from app.config import get_settings
from app.logging_manager import get_logging_manager


def main():
    """
    Главная функция - точка входа в приложение
    """
    settings = get_settings()
    get_logging_manager().setup(log_level=settings.log_level, log_dir=settings.log_dir)

    logger = logging.getLogger(__name__)

    try:
        app = QApplication(sys.argv)
        app.setStyle('Fusion')
        logger.info("Qt приложение инициализировано")

        client = AdminClient()
        if not client.is_available():
            logger.warning(f"Хранилище недоступно: {client.base_url}")

        from app.gui.main_window import MainWindow
        window = MainWindow(client)
        window.show()
        logger.info("Главное окно открыто")

        exit_code = app.exec()

        logger.info(f"Приложение завершено с кодом: {exit_code}")
        sys.exit(exit_code)

    except Exception as e:
        logger.critical(f"Критическая ошибка при запуске приложения: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
