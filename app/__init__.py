"""
Content Admin - Консоль администратора контента

Desktop-приложение для управления статьями и многоуровневым деревом
категорий поверх REST API хранилища контента.

Основные возможности:
- Дерево категорий с поиском, созданием, редактированием и удалением
- Загрузка иконок категорий
- REST клиент статей
"""

from _metadata import __version__, __product__, __description__
