"""
Экспорт раскладок в DXF для ЧПУ и CAD

Каждая деталь - четыре отрезка контура и подпись с размерами по центру.
Все объекты на слое "0", других сущностей нет.
"""

import io
import logging
from typing import Optional

import ezdxf
from ezdxf.enums import TextEntityAlignment

from .optimizer_core import OptimizationResult, CutLayout, CutPosition

logger = logging.getLogger(__name__)

DXF_VERSION = 'R2010'
DRAWING_EXTENT = 10000.0
TEXT_HEIGHT = 2.5
LAYOUT_GAP = 100.0  # зазор между листами по оси X
DEFAULT_LAYER = '0'


def format_dimension(value: float) -> str:
    return f"{value:g}"


def piece_label(pos: CutPosition) -> str:
    return f"{format_dimension(pos.width)}×{format_dimension(pos.height)}"


def _add_rectangle(msp, pos: CutPosition, offset_x: float):
    x = pos.x + offset_x
    y = pos.y
    x2 = x + pos.width
    y2 = y + pos.height
    attribs = {'layer': DEFAULT_LAYER}

    msp.add_line((x, y), (x2, y), dxfattribs=attribs)    # низ
    msp.add_line((x2, y), (x2, y2), dxfattribs=attribs)  # право
    msp.add_line((x2, y2), (x, y2), dxfattribs=attribs)  # верх
    msp.add_line((x, y2), (x, y), dxfattribs=attribs)    # лево

    msp.add_text(
        piece_label(pos),
        dxfattribs={'layer': DEFAULT_LAYER, 'height': TEXT_HEIGHT},
    ).set_placement((x + pos.width / 2, y + pos.height / 2), align=TextEntityAlignment.MIDDLE_CENTER)


def _add_layout(msp, layout: CutLayout, offset_x: float):
    for pos in layout.positions:
        _add_rectangle(msp, pos, offset_x)


def create_document(result: OptimizationResult, layout_index: Optional[int] = None):
    """
    Создание DXF документа

    Args:
        result: результат оптимизации
        layout_index: номер листа для экспорта одного листа, None - все листы подряд по оси X
    """
    doc = ezdxf.new(DXF_VERSION)
    msp = doc.modelspace()
    # При записи ezdxf переносит габариты modelspace в $EXTMIN/$EXTMAX заголовка
    extmin = (0.0, 0.0, 0.0)
    extmax = (DRAWING_EXTENT, DRAWING_EXTENT, 0.0)
    msp.dxf.extmin = extmin
    msp.dxf.extmax = extmax
    doc.header['$EXTMIN'] = extmin
    doc.header['$EXTMAX'] = extmax

    if layout_index is not None:
        _add_layout(msp, result.layouts[layout_index], 0.0)
        return doc

    offset_x = 0.0
    for layout in result.layouts:
        _add_layout(msp, layout, offset_x)
        offset_x += layout.stock_width + LAYOUT_GAP

    return doc


def generate_dxf(result: OptimizationResult, layout_index: Optional[int] = None) -> str:
    """DXF в виде строки"""
    doc = create_document(result, layout_index)
    stream = io.StringIO()
    doc.write(stream)
    return stream.getvalue()


def export_dxf_file(result: OptimizationResult, path: str, layout_index: Optional[int] = None) -> str:
    """Сохранение DXF в файл, возвращает путь"""
    doc = create_document(result, layout_index)
    doc.saveas(path)
    logger.info(f"📐 DXF сохранен: {path} (листов: {1 if layout_index is not None else len(result.layouts)})")
    return path
