"""
Виджеты визуализации для приложения оптимизации раскроя
"""

from PyQt5.QtWidgets import QGraphicsView, QGraphicsTextItem
from PyQt5.QtCore import Qt
from PyQt5.QtGui import QBrush, QPen, QColor, QPainter, QFont

from ..core.optimizer_core import GrooveDirection, Side
from .config import VISUALIZATION_DEFAULTS, COLORS, PIECE_PALETTE

# Поворот детали - это транспонирование: верх <-> лево, низ <-> право
_TRANSPOSED_SIDES = {
    Side.TOP: Side.LEFT,
    Side.LEFT: Side.TOP,
    Side.BOTTOM: Side.RIGHT,
    Side.RIGHT: Side.BOTTOM,
}


def piece_color(index):
    """Цвет детали по порядку размещения (палитра по кругу)"""
    return PIECE_PALETTE[index % len(PIECE_PALETTE)]


def groove_rect(pos, groove):
    """
    Прямоугольник паза в координатах листа

    Args:
        pos: CutPosition размещенной детали
        groove: Groove детали (в координатах неповернутой детали)

    Returns:
        (x, y, width, height) или None, если паз выключен
    """
    if groove is None or not groove.enabled:
        return None

    direction = groove.direction
    offset_side = groove.offset_side
    if pos.rotated:
        direction = GrooveDirection.VERTICAL if direction == GrooveDirection.HORIZONTAL else GrooveDirection.HORIZONTAL
        offset_side = _TRANSPOSED_SIDES.get(offset_side) if offset_side else None
        length = groove.resolved_length(pos.height, pos.width)
    else:
        length = groove.resolved_length(pos.width, pos.height)

    if direction == GrooveDirection.HORIZONTAL:
        x = pos.x + (pos.width - length) / 2
        if offset_side == Side.BOTTOM:
            y = pos.y + pos.height - groove.offset - groove.width
        else:
            y = pos.y + groove.offset
        return x, y, length, groove.width

    y = pos.y + (pos.height - length) / 2
    if offset_side == Side.RIGHT:
        x = pos.x + pos.width - groove.offset - groove.width
    else:
        x = pos.x + groove.offset
    return x, y, groove.width, length


class ZoomableGraphicsView(QGraphicsView):
    """Виджет графической области с возможностью масштабирования"""

    def __init__(self, scene, parent=None):
        super().__init__(scene, parent)
        self.setRenderHint(QPainter.Antialiasing)
        self.setDragMode(QGraphicsView.ScrollHandDrag)

    def wheelEvent(self, event):
        """Обработка колеса мыши для масштабирования"""
        factor = 1.2 if event.angleDelta().y() > 0 else 1 / 1.2
        self.scale(factor, factor)
        event.accept()

    def fit_scene(self):
        """Вписать лист в область просмотра с сохранением пропорций"""
        rect = self.scene().itemsBoundingRect()
        if rect.isEmpty():
            return
        self.resetTransform()
        viewport = self.viewport().rect()
        scale = min(viewport.width() / rect.width(), viewport.height() / rect.height())
        scale *= VISUALIZATION_DEFAULTS['fit_margin']
        self.scale(scale, scale)
        self.centerOn(rect.center())


class VisualizationManager:
    """Менеджер визуализации: навигация по листам и отрисовка текущего"""

    def __init__(self, graphics_view, graphics_scene):
        self.graphics_view = graphics_view
        self.graphics_scene = graphics_scene
        self.graphics_scene.setBackgroundBrush(QBrush(QColor("#1e1e1e")))
        self.optimization_result = None
        self.cut_lookup = {}
        self.current_sheet_index = 0
        self.sheets_combo = None
        self.prev_sheet_btn = None
        self.next_sheet_btn = None
        self.sheet_changed_callback = None

    def setup_navigation(self, sheets_combo, prev_btn, next_btn):
        """Настройка навигации по листам"""
        self.sheets_combo = sheets_combo
        self.prev_sheet_btn = prev_btn
        self.next_sheet_btn = next_btn

        self.sheets_combo.currentIndexChanged.connect(self.on_sheet_selected)
        self.prev_sheet_btn.clicked.connect(self.on_prev_sheet)
        self.next_sheet_btn.clicked.connect(self.on_next_sheet)

    def set_sheet_changed_callback(self, callback):
        self.sheet_changed_callback = callback

    def update_visualization(self, result, cut_pieces=(), stock_names=None):
        """Обновление визуализации с результатами оптимизации"""
        self.optimization_result = result
        self.cut_lookup = {cut.id: cut for cut in cut_pieces}
        stock_names = stock_names or {}

        self.sheets_combo.blockSignals(True)
        self.sheets_combo.clear()
        for i, layout in enumerate(result.layouts if result else []):
            name = stock_names.get(layout.stock_id) or layout.stock_id
            self.sheets_combo.addItem(f"Лист {i + 1}: {name} ({layout.stock_width:g}×{layout.stock_height:g} мм)")
        self.sheets_combo.blockSignals(False)

        if result and result.layouts:
            self.sheets_combo.setCurrentIndex(0)
            self.show_sheet(0)
        else:
            self.graphics_scene.clear()

        self.update_navigation_buttons()

    def show_sheet(self, index):
        """Отображение конкретного листа"""
        if not self.optimization_result or not (0 <= index < len(self.optimization_result.layouts)):
            return

        self.current_sheet_index = index
        draw_layout(self.graphics_scene, self.optimization_result.layouts[index], self.cut_lookup)
        self.graphics_view.fit_scene()

        if self.sheet_changed_callback:
            self.sheet_changed_callback(index)

    def on_sheet_selected(self, index):
        if index >= 0:
            self.show_sheet(index)
            self.update_navigation_buttons()

    def on_prev_sheet(self):
        current = self.sheets_combo.currentIndex()
        if current > 0:
            self.sheets_combo.setCurrentIndex(current - 1)

    def on_next_sheet(self):
        current = self.sheets_combo.currentIndex()
        if current < self.sheets_combo.count() - 1:
            self.sheets_combo.setCurrentIndex(current + 1)

    def update_navigation_buttons(self):
        """Обновление состояния кнопок навигации"""
        count = self.sheets_combo.count()
        current_index = self.sheets_combo.currentIndex()
        self.prev_sheet_btn.setEnabled(count > 0 and current_index > 0)
        self.next_sheet_btn.setEnabled(count > 0 and current_index < count - 1)


def draw_layout(graphics_scene, layout, cut_lookup=None, show_grid=True):
    """
    Отрисовка раскладки листа на графической сцене (1 мм = 1 единица сцены)

    Args:
        graphics_scene: QGraphicsScene для отрисовки
        layout: CutLayout
        cut_lookup: словарь id -> CutPiece для отрисовки пазов
        show_grid: показывать ли сетку

    Returns:
        QGraphicsRectItem: прямоугольник листа
    """
    cut_lookup = cut_lookup or {}
    graphics_scene.clear()

    sheet_width = layout.stock_width
    sheet_height = layout.stock_height

    # Фон листа подсвечен как отход, детали рисуются поверх
    waste_color = QColor(COLORS['waste_fill'])
    waste_color.setAlphaF(0.15)
    sheet_rect = graphics_scene.addRect(
        0, 0, sheet_width, sheet_height,
        QPen(QColor(COLORS['sheet_border']), 3), QBrush(waste_color)
    )

    if show_grid:
        _draw_grid_on_scene(graphics_scene, sheet_width, sheet_height)

    detail_pen = QPen(QColor(COLORS['detail_border']), 1)
    groove_pen = QPen(QColor(COLORS['groove']), 1)
    groove_pen.setStyle(Qt.DashLine)

    for index, pos in enumerate(layout.positions):
        fill = QColor(piece_color(index))
        fill.setAlphaF(0.7)
        graphics_scene.addRect(pos.x, pos.y, pos.width, pos.height, detail_pen, QBrush(fill))

        cut = cut_lookup.get(pos.piece_id)
        rect = groove_rect(pos, cut.groove) if cut else None
        if rect:
            graphics_scene.addRect(*rect, groove_pen)

        label = f"{pos.width:g}×{pos.height:g}"
        font_size = _calculate_adaptive_font_size(label, pos.width, pos.height)
        if font_size > 0:
            text_item = QGraphicsTextItem(label)
            text_item.setDefaultTextColor(QColor(COLORS['text']))
            text_item.setFont(QFont("Arial", font_size, QFont.Bold))
            text_rect = text_item.boundingRect()
            text_item.setPos(pos.x + (pos.width - text_rect.width()) / 2,
                             pos.y + (pos.height - text_rect.height()) / 2)
            graphics_scene.addItem(text_item)

    padding = max(sheet_width, sheet_height) * 0.05
    graphics_scene.setSceneRect(-padding, -padding, sheet_width + padding * 2, sheet_height + padding * 2)
    return sheet_rect


def _draw_grid_on_scene(graphics_scene, width, height):
    """Отрисовка сетки на сцене"""
    grid_size = VISUALIZATION_DEFAULTS['grid_size']
    grid_pen = QPen(QColor(COLORS['grid']), 1)
    grid_pen.setStyle(Qt.DotLine)

    x = grid_size
    while x < width:
        graphics_scene.addLine(x, 0, x, height, grid_pen)
        x += grid_size

    y = grid_size
    while y < height:
        graphics_scene.addLine(0, y, width, y, grid_pen)
        y += grid_size


def _calculate_adaptive_font_size(text, rect_width, rect_height):
    """
    Вычисляет размер шрифта, при котором текст помещается в прямоугольник

    Returns:
        int: размер шрифта (0 если текст не помещается)
    """
    min_dimension = min(rect_width, rect_height)
    if min_dimension > 400:
        base_font_size = 28
    elif min_dimension > 200:
        base_font_size = 24
    elif min_dimension > 100:
        base_font_size = 20
    else:
        base_font_size = 14

    margin = 0.75 if min_dimension < 100 else 0.85
    for font_size in range(base_font_size, 7, -1):
        temp_item = QGraphicsTextItem(text)
        temp_item.setFont(QFont("Arial", font_size, QFont.Bold))
        text_rect = temp_item.boundingRect()
        if text_rect.width() <= rect_width * margin and text_rect.height() <= rect_height * margin:
            return font_size

    return 0
