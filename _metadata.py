"""
Content Admin - Централизованные метаданные проекта

Этот модуль содержит общую информацию о продукте,
которая используется во всех частях системы.
"""

__product__ = "Content Admin"
__version__ = "0.1"
__description__ = "Консоль администратора статей и дерева категорий"
__author__ = "Content Admin Team"
__license__ = "MIT"
__status__ = "Alpha"
__python_requires__ = ">=3.10"

__long_description__ = """
Content Admin - настольная консоль для управления контентом:
статьями и многоуровневым деревом категорий.

Основные возможности:
- Дерево категорий произвольной глубины с поиском по названию
- Создание корневых и дочерних категорий, редактирование, удаление
- Загрузка иконок категорий во внешнее хранилище
- REST клиент статей
"""

__tech_stack__ = {
    "python": "3.10+",
    "gui": "PySide6",
    "http": "httpx",
    "schemas": "pydantic",
}


def get_version_info():
    """Возвращает полную информацию о версии"""
    return f"{__product__} v{__version__} ({__status__})"


def get_about_text():
    """Возвращает текст 'О программе' для GUI"""
    return f"""
{__product__}
Версия {__version__}

{__description__}

Статус: {__status__}
Лицензия: {__license__}
Python: {__python_requires__}
"""
