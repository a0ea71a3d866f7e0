"""
Диалоги для приложения оптимизации раскроя
"""

from PyQt5.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QFormLayout, QLabel, QPushButton, QProgressBar,
    QMessageBox, QLineEdit, QDoubleSpinBox, QSpinBox, QComboBox, QCheckBox,
    QDialogButtonBox
)
from PyQt5.QtCore import Qt

from ..core.optimizer_core import (
    EdgeBand, Groove, GrooveDirection, GrooveLength, Pattern, Side
)
from .config import DIALOG_STYLE, INPUT_LIMITS, PATTERN_LABELS


def _center_on_parent(dialog, parent, width, height):
    """Центрирование относительно родительского окна"""
    if parent:
        parent_geo = parent.geometry()
        x = parent_geo.x() + (parent_geo.width() - width) // 2
        y = parent_geo.y() + (parent_geo.height() - height) // 2
        dialog.setGeometry(x, y, width, height)


def _dimension_spin(value=0.0, maximum=None, suffix=" мм"):
    spin = QDoubleSpinBox()
    spin.setDecimals(1)
    spin.setRange(0, maximum if maximum is not None else INPUT_LIMITS['dimension_max'])
    spin.setValue(value)
    spin.setSuffix(suffix)
    return spin


def _pattern_combo(current=Pattern.NONE):
    combo = QComboBox()
    for pattern in Pattern:
        combo.addItem(PATTERN_LABELS[pattern.value], pattern)
    combo.setCurrentIndex(list(Pattern).index(current))
    return combo


class ProgressDialog(QDialog):
    """Диалог прогресса для длительных операций"""

    def __init__(self, parent=None, title="Оптимизация...", message="Выполняется раскладка деталей..."):
        super().__init__(parent)
        self.setWindowTitle(title)
        self.setModal(True)
        self.setFixedSize(400, 120)
        _center_on_parent(self, parent, 400, 120)
        self.setStyleSheet(DIALOG_STYLE)

        layout = QVBoxLayout()

        self.message_label = QLabel(message)
        self.message_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.message_label)

        self.progress_bar = QProgressBar()
        self.progress_bar.setRange(0, 100)
        self.progress_bar.setValue(0)
        layout.addWidget(self.progress_bar)

        self.setLayout(layout)

    def set_progress(self, value):
        self.progress_bar.setValue(int(value))


class PieceDialog(QDialog):
    """Добавление/редактирование листа или детали"""

    def __init__(self, parent=None, title="Деталь", name="", width=0.0, height=0.0,
                 quantity=1, pattern=Pattern.NONE):
        super().__init__(parent)
        self.setWindowTitle(title)
        self.setStyleSheet(DIALOG_STYLE)
        _center_on_parent(self, parent, 360, 240)

        layout = QFormLayout()

        self.name_edit = QLineEdit(name)
        layout.addRow("Название:", self.name_edit)

        self.width_spin = _dimension_spin(width)
        layout.addRow("Ширина:", self.width_spin)

        self.height_spin = _dimension_spin(height)
        layout.addRow("Высота:", self.height_spin)

        self.quantity_spin = QSpinBox()
        self.quantity_spin.setRange(1, INPUT_LIMITS['quantity_max'])
        self.quantity_spin.setValue(max(1, quantity))
        layout.addRow("Количество:", self.quantity_spin)

        self.pattern_combo = _pattern_combo(pattern)
        layout.addRow("Текстура:", self.pattern_combo)

        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        buttons.accepted.connect(self._on_accept)
        buttons.rejected.connect(self.reject)
        layout.addRow(buttons)

        self.setLayout(layout)

    def _on_accept(self):
        if self.width_spin.value() <= 0 or self.height_spin.value() <= 0:
            show_centered_message(self, "Некорректный размер", "Ширина и высота должны быть больше нуля", "warning")
            return
        self.accept()

    def get_values(self):
        """Значения полей в виде аргументов StockPiece/CutPiece"""
        return {
            'name': self.name_edit.text().strip(),
            'width': self.width_spin.value(),
            'height': self.height_spin.value(),
            'quantity': self.quantity_spin.value(),
            'pattern': self.pattern_combo.currentData(),
        }


class EdgeBandDialog(QDialog):
    """Настройка кромки для детали"""

    def __init__(self, parent=None, edge_band=None):
        super().__init__(parent)
        self.setWindowTitle("Кромка")
        self.setStyleSheet(DIALOG_STYLE)
        _center_on_parent(self, parent, 360, 260)

        edge_band = edge_band or EdgeBand(name="", thickness=0.0)
        layout = QFormLayout()

        self.name_edit = QLineEdit(edge_band.name)
        layout.addRow("Материал:", self.name_edit)

        self.thickness_spin = _dimension_spin(edge_band.thickness, INPUT_LIMITS['edge_band_max'])
        layout.addRow("Толщина:", self.thickness_spin)

        sides_layout = QHBoxLayout()
        self.top_check = QCheckBox("Сверху")
        self.top_check.setChecked(edge_band.top)
        self.bottom_check = QCheckBox("Снизу")
        self.bottom_check.setChecked(edge_band.bottom)
        self.left_check = QCheckBox("Слева")
        self.left_check.setChecked(edge_band.left)
        self.right_check = QCheckBox("Справа")
        self.right_check.setChecked(edge_band.right)
        for check in (self.top_check, self.bottom_check, self.left_check, self.right_check):
            sides_layout.addWidget(check)
        layout.addRow("Стороны:", sides_layout)

        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel | QDialogButtonBox.Reset)
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        buttons.button(QDialogButtonBox.Reset).setText("Без кромки")
        buttons.button(QDialogButtonBox.Reset).clicked.connect(self._on_remove)
        layout.addRow(buttons)

        self.removed = False
        self.setLayout(layout)

    def _on_remove(self):
        self.removed = True
        self.accept()

    def get_edge_band(self):
        """EdgeBand или None, если кромка снята или не действует"""
        if self.removed:
            return None
        band = EdgeBand(
            name=self.name_edit.text().strip(),
            thickness=self.thickness_spin.value(),
            top=self.top_check.isChecked(),
            bottom=self.bottom_check.isChecked(),
            left=self.left_check.isChecked(),
            right=self.right_check.isChecked(),
        )
        return band if band.has_effect else None


class GrooveDialog(QDialog):
    """Настройка паза для детали"""

    def __init__(self, parent=None, groove=None):
        super().__init__(parent)
        self.setWindowTitle("Паз")
        self.setStyleSheet(DIALOG_STYLE)
        _center_on_parent(self, parent, 380, 320)

        groove = groove or Groove(enabled=True, width=4.0)
        layout = QFormLayout()

        self.enabled_check = QCheckBox("Добавить паз")
        self.enabled_check.setChecked(groove.enabled)
        layout.addRow(self.enabled_check)

        self.width_spin = _dimension_spin(groove.width, 100)
        layout.addRow("Ширина паза:", self.width_spin)

        self.direction_combo = QComboBox()
        self.direction_combo.addItem("Горизонтально (вдоль ширины)", GrooveDirection.HORIZONTAL)
        self.direction_combo.addItem("Вертикально (вдоль высоты)", GrooveDirection.VERTICAL)
        self.direction_combo.setCurrentIndex(list(GrooveDirection).index(groove.direction))
        layout.addRow("Направление:", self.direction_combo)

        self.length_combo = QComboBox()
        self.length_combo.addItem("На всю длину", GrooveLength.FULL)
        self.length_combo.addItem("Заданная длина", GrooveLength.CUSTOM)
        self.length_combo.setCurrentIndex(list(GrooveLength).index(groove.length))
        layout.addRow("Длина:", self.length_combo)

        self.length_spin = _dimension_spin(groove.length_value or 0.0)
        layout.addRow("Длина паза:", self.length_spin)
        self.length_combo.currentIndexChanged.connect(self._update_length_state)

        self.offset_side_combo = QComboBox()
        for side, label in ((Side.TOP, "Сверху"), (Side.BOTTOM, "Снизу"), (Side.LEFT, "Слева"), (Side.RIGHT, "Справа")):
            self.offset_side_combo.addItem(label, side)
        if groove.offset_side is not None:
            self.offset_side_combo.setCurrentIndex(list(Side).index(groove.offset_side))
        layout.addRow("Отступ от края:", self.offset_side_combo)

        self.offset_spin = _dimension_spin(groove.offset)
        layout.addRow("Расстояние:", self.offset_spin)

        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        layout.addRow(buttons)

        self.setLayout(layout)
        self._update_length_state()

    def _update_length_state(self):
        self.length_spin.setEnabled(self.length_combo.currentData() == GrooveLength.CUSTOM)

    def get_groove(self):
        """Groove или None, если паз выключен"""
        if not self.enabled_check.isChecked():
            return None
        length = self.length_combo.currentData()
        return Groove(
            enabled=True,
            width=self.width_spin.value(),
            direction=self.direction_combo.currentData(),
            length=length,
            length_value=self.length_spin.value() if length == GrooveLength.CUSTOM else None,
            offset_side=self.offset_side_combo.currentData(),
            offset=self.offset_spin.value(),
        )


def show_centered_message(parent, title, message, icon_type="information"):
    """Показ центрированного сообщения"""
    msg_box = QMessageBox(parent)
    msg_box.setWindowTitle(title)
    msg_box.setText(message)

    if icon_type == "information":
        msg_box.setIcon(QMessageBox.Information)
    elif icon_type == "warning":
        msg_box.setIcon(QMessageBox.Warning)
    elif icon_type == "critical":
        msg_box.setIcon(QMessageBox.Critical)

    msg_box.setStyleSheet(DIALOG_STYLE)

    if parent:
        parent_geo = parent.geometry()
        msg_box.move(
            parent_geo.x() + (parent_geo.width() - msg_box.width()) // 2,
            parent_geo.y() + (parent_geo.height() - msg_box.height()) // 2
        )

    return msg_box.exec_()
