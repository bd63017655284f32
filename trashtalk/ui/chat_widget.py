from PySide6.QtWidgets import QScrollArea, QWidget, QVBoxLayout, QLabel
from PySide6.QtCore import Qt, QTimer

PLACEHOLDER = "..."

USER_STYLE = ("background: #1976D213; color: #1976D2; padding: 5px 11px;"
              "border-radius: 12px; font-weight: 500;")
AI_STYLE = ("background: #ff40811a; color: #FF4081; padding: 5px 11px;"
            "border-radius: 12px; font-weight: 500;")


class ChatWidget(QScrollArea):
    """
    scrolling chat log of speech bubbles
    """
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setWidgetResizable(True)
        self.setMinimumHeight(150)
        self._inner = QWidget()
        self._layout = QVBoxLayout(self._inner)
        self._layout.addStretch(1)
        self.setWidget(self._inner)
        self._messages = []         # [(sender, QLabel)]
        self._pending = {}          # ticket -> placeholder label
        self._dropped = set()       # tickets whose placeholder was removed

    def messages(self):
        return [(sender, label.text()) for sender, label in self._messages]

    def add_message(self, sender, text):
        # bubbles stack above the stretch, user on the right
        label = QLabel(text)
        label.setWordWrap(True)
        label.setStyleSheet(USER_STYLE if sender == "user" else AI_STYLE)
        align = Qt.AlignRight if sender == "user" else Qt.AlignLeft
        self._layout.insertWidget(self._layout.count() - 1, label, 0, align)
        self._messages.append((sender, label))
        QTimer.singleShot(0, self._scroll_to_bottom)
        return label

    def add_placeholder(self, ticket):
        self._pending[ticket] = self.add_message("ai", PLACEHOLDER)

    def resolve(self, ticket, text):
        """
        fill the placeholder for `ticket`; unknown tickets just append,
        dropped ones are ignored
        """
        if ticket in self._dropped:
            self._dropped.discard(ticket)
            return
        label = self._pending.pop(ticket, None)
        if label is None:
            self.add_message("ai", text)
        else:
            label.setText(text)

    def drop_pending(self):
        # terminal lines replace whatever roast is still loading
        for ticket in list(self._pending):
            label = self._pending.pop(ticket)
            self._dropped.add(ticket)
            self._layout.removeWidget(label)
            label.deleteLater()
            self._messages = [m for m in self._messages if m[1] is not label]

    def clear(self):
        for _, label in self._messages:
            self._layout.removeWidget(label)
            label.deleteLater()
        self._messages = []
        self._pending = {}
        self._dropped = set()

    def _scroll_to_bottom(self):
        bar = self.verticalScrollBar()
        bar.setValue(bar.maximum())
