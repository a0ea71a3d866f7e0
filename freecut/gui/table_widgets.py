"""
Виджеты и функции для работы с таблицами в приложении оптимизации
"""

import logging

from PyQt5.QtWidgets import QTableWidget, QTableWidgetItem, QAbstractItemView, QHeaderView
from PyQt5.QtCore import Qt

from .config import TABLE_HEADERS, PATTERN_LABELS

logger = logging.getLogger(__name__)

# Роль для хранения id листа/детали в первой колонке строки
PIECE_ID_ROLE = Qt.UserRole


def _create_numeric_item(value, default=0):
    """Создание элемента таблицы для числовых значений с правильной сортировкой"""
    if value is None:
        numeric_value = default
    elif isinstance(value, float) and value.is_integer():
        numeric_value = int(value)
    else:
        numeric_value = value

    item = QTableWidgetItem()
    item.setData(Qt.DisplayRole, numeric_value)
    item.setTextAlignment(Qt.AlignRight | Qt.AlignVCenter)
    item.setFlags(item.flags() & ~Qt.ItemIsEditable)
    return item


def _create_text_item(value):
    """Создание элемента таблицы для текстовых значений"""
    text_value = '' if value is None else str(value).strip()
    item = QTableWidgetItem(text_value)
    item.setTextAlignment(Qt.AlignLeft | Qt.AlignVCenter)
    item.setFlags(item.flags() & ~Qt.ItemIsEditable)
    return item


def setup_table(table: QTableWidget, name: str):
    """Общая настройка таблицы: заголовки, выделение строк"""
    headers = TABLE_HEADERS[name]
    table.setColumnCount(len(headers))
    table.setHorizontalHeaderLabels(headers)
    table.setSelectionBehavior(QAbstractItemView.SelectRows)
    table.setSelectionMode(QAbstractItemView.SingleSelection)
    table.setAlternatingRowColors(True)
    table.verticalHeader().setVisible(False)
    table.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)


def selected_piece_id(table: QTableWidget):
    """id выбранной строки или None"""
    row = table.currentRow()
    if row < 0:
        return None
    item = table.item(row, 0)
    return item.data(PIECE_ID_ROLE) if item else None


def _name_item(piece):
    item = _create_text_item(piece.name or piece.id)
    item.setData(PIECE_ID_ROLE, piece.id)
    return item


def fill_stock_table(table: QTableWidget, stock_pieces):
    """Заполнение таблицы листов"""
    table.setRowCount(len(stock_pieces))
    for row, stock in enumerate(stock_pieces):
        table.setItem(row, 0, _name_item(stock))
        table.setItem(row, 1, _create_numeric_item(stock.width))
        table.setItem(row, 2, _create_numeric_item(stock.height))
        table.setItem(row, 3, _create_numeric_item(stock.quantity))
        table.setItem(row, 4, _create_text_item(PATTERN_LABELS[stock.pattern.value]))


def fill_cuts_table(table: QTableWidget, cut_pieces):
    """Заполнение таблицы деталей"""
    table.setRowCount(len(cut_pieces))
    for row, cut in enumerate(cut_pieces):
        table.setItem(row, 0, _name_item(cut))
        table.setItem(row, 1, _create_numeric_item(cut.width))
        table.setItem(row, 2, _create_numeric_item(cut.height))
        table.setItem(row, 3, _create_numeric_item(cut.quantity))
        table.setItem(row, 4, _create_text_item(PATTERN_LABELS[cut.pattern.value]))

        band = cut.edge_band
        band_text = f"{band.name} {band.thickness:g} мм" if band else ""
        table.setItem(row, 5, _create_text_item(band_text.strip()))

        groove = cut.groove
        groove_text = f"{groove.width:g} мм, {groove.direction.value}" if groove and groove.enabled else ""
        table.setItem(row, 6, _create_text_item(groove_text))


def fill_layouts_table(table: QTableWidget, result, stock_names=None):
    """Сводная таблица по листам результата"""
    layouts = result.layouts if result else []
    stock_names = stock_names or {}
    table.setRowCount(len(layouts))
    for row, layout in enumerate(layouts):
        table.setItem(row, 0, _create_text_item(f"{row + 1}: {stock_names.get(layout.stock_id) or layout.stock_id}"))
        table.setItem(row, 1, _create_numeric_item(len(layout.positions)))
        table.setItem(row, 2, _create_numeric_item(round(layout.utilization_rate, 2)))
        table.setItem(row, 3, _create_numeric_item(round(layout.waste_area, 2)))
