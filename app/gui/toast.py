"""
Всплывающие уведомления (Toast)
"""

from PySide6.QtWidgets import QLabel, QGraphicsOpacityEffect
from PySide6.QtCore import Qt, QTimer, QPropertyAnimation, QEasingCurve

TOAST_COLORS = {
    "success": "#4CAF50",
    "info": "#0e639c",
    "error": "#f44336",
}


class Toast(QLabel):
    """Всплывающее уведомление внизу родительского окна"""

    def __init__(self, parent, message: str, duration: int = 2500, level: str = "success"):
        super().__init__(message, parent)
        self.setAlignment(Qt.AlignCenter)
        self.setWordWrap(True)
        self.setMaximumWidth(420)
        self.setStyleSheet(f"""
            QLabel {{
                background-color: {TOAST_COLORS.get(level, TOAST_COLORS['info'])};
                color: white;
                padding: 10px 20px;
                border-radius: 6px;
                font-size: 13px;
            }}
        """)
        self.adjustSize()

        parent_rect = parent.rect()
        self.move(
            (parent_rect.width() - self.width()) // 2,
            parent_rect.height() - self.height() - 40,
        )

        self._effect = QGraphicsOpacityEffect(self)
        self.setGraphicsEffect(self._effect)
        self._effect.setOpacity(0.0)

        self._fade_in = self._animation(0.0, 1.0)
        self._fade_out = self._animation(1.0, 0.0)
        self._fade_out.finished.connect(self.deleteLater)

        self.show()
        self._fade_in.start()
        QTimer.singleShot(duration, self._fade_out.start)

    def _animation(self, start: float, end: float) -> QPropertyAnimation:
        anim = QPropertyAnimation(self._effect, b"opacity", self)
        anim.setDuration(200)
        anim.setStartValue(start)
        anim.setEndValue(end)
        anim.setEasingCurve(QEasingCurve.InOutQuad)
        return anim


def show_toast(parent, message: str, duration: int = 2500, level: str = "success"):
    """Показать всплывающее уведомление"""
    Toast(parent, message, duration, level)
