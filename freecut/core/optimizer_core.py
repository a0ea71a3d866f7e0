#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Модуль оптимизации раскроя прямоугольных деталей из листовых панелей

Жадный алгоритм "сначала крупные": для каждого экземпляра панели детали
сортируются по убыванию площади и размещаются в первую допустимую позицию
сеточного сканирования с учетом пропила, кромки и направления текстуры.
"""

import time
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Dict, Optional, Tuple, Callable, Any
from enum import Enum

logger = logging.getLogger(__name__)

DEFAULT_KERF = 3.0
DEFAULT_GRID_STEP = 10.0
MIN_CUT_DIMENSION = 1.0


class Pattern(Enum):
    """Направление текстуры/рисунка"""
    NONE = "none"
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class RotationMode(Enum):
    """Режимы поворота деталей"""
    NONE = "none"           # Без поворота
    ALLOW_90 = "allow_90"   # Разрешить поворот на 90° (если позволяет текстура)


class GrooveLength(Enum):
    FULL = "full"
    CUSTOM = "custom"


class GrooveDirection(Enum):
    HORIZONTAL = "horizontal"  # параллельно ширине
    VERTICAL = "vertical"      # параллельно высоте


class Side(Enum):
    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class EdgeBand:
    """Кромка: толщина вычитается из размера детали с каждой отмеченной стороны"""
    name: str
    thickness: float
    top: bool = False
    bottom: bool = False
    left: bool = False
    right: bool = False

    @property
    def has_effect(self) -> bool:
        return self.thickness > 0 and (self.top or self.bottom or self.left or self.right)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'thickness': self.thickness,
            'sides': {
                'top': self.top,
                'bottom': self.bottom,
                'left': self.left,
                'right': self.right,
            },
        }


@dataclass(frozen=True)
class Groove:
    """Паз. Оптимизатор его не учитывает, данные нужны только для отрисовки"""
    enabled: bool
    width: float
    direction: GrooveDirection = GrooveDirection.HORIZONTAL
    length: GrooveLength = GrooveLength.FULL
    length_value: Optional[float] = None
    offset_side: Optional[Side] = None
    offset: float = 0.0

    def resolved_length(self, piece_width: float, piece_height: float) -> float:
        """Длина паза на детали заданного размера"""
        full = piece_width if self.direction == GrooveDirection.HORIZONTAL else piece_height
        if self.length == GrooveLength.CUSTOM and self.length_value is not None:
            return max(0.0, min(float(self.length_value), full))
        return full

    def to_dict(self) -> Dict[str, Any]:
        return {
            'enabled': self.enabled,
            'width': self.width,
            'direction': self.direction.value,
            'length': self.length.value,
            'lengthValue': self.length_value,
            'offsetSide': self.offset_side.value if self.offset_side else None,
            'offset': self.offset,
        }


@dataclass(frozen=True)
class StockPiece:
    """Лист (панель) на складе"""
    id: str
    width: float
    height: float
    quantity: int = 1
    name: str = ""
    pattern: Pattern = Pattern.NONE

    @property
    def area(self) -> float:
        return self.width * self.height

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'width': self.width,
            'height': self.height,
            'quantity': self.quantity,
            'pattern': self.pattern.value,
        }


@dataclass(frozen=True)
class CutPiece:
    """Деталь для раскроя"""
    id: str
    width: float
    height: float
    quantity: int = 1
    name: str = ""
    pattern: Pattern = Pattern.NONE
    edge_band: Optional[EdgeBand] = None
    groove: Optional[Groove] = None

    @property
    def can_rotate(self) -> bool:
        """Поворот запрещен, если задано направление текстуры"""
        return self.pattern == Pattern.NONE

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'width': self.width,
            'height': self.height,
            'quantity': self.quantity,
            'pattern': self.pattern.value,
            'edgeBand': self.edge_band.to_dict() if self.edge_band else None,
            'groove': self.groove.to_dict() if self.groove else None,
        }


@dataclass(frozen=True)
class CutPosition:
    """Размещенная деталь в локальных координатах листа"""
    piece_id: str
    x: float
    y: float
    width: float
    height: float
    rotated: bool = False

    @property
    def area(self) -> float:
        return self.width * self.height

    def to_dict(self) -> Dict[str, Any]:
        return {
            'pieceId': self.piece_id,
            'x': self.x,
            'y': self.y,
            'width': self.width,
            'height': self.height,
            'rotated': self.rotated,
        }


@dataclass
class CutLayout:
    """Раскладка на одном экземпляре листа"""
    stock_id: str
    stock_width: float
    stock_height: float
    positions: List[CutPosition] = field(default_factory=list)
    waste_area: float = 0.0
    utilization_rate: float = 0.0

    @property
    def total_area(self) -> float:
        return self.stock_width * self.stock_height

    @property
    def used_area(self) -> float:
        return sum(pos.area for pos in self.positions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'stockId': self.stock_id,
            'stockWidth': self.stock_width,
            'stockHeight': self.stock_height,
            'positions': [pos.to_dict() for pos in self.positions],
            'wasteArea': self.waste_area,
            'utilizationRate': self.utilization_rate,
        }


@dataclass
class OptimizationParams:
    """Параметры оптимизации"""
    kerf: float = DEFAULT_KERF
    grid_step: float = DEFAULT_GRID_STEP
    rotation_mode: RotationMode = RotationMode.ALLOW_90
    max_workers: int = 1  # >1 - листы раскладываются в пуле потоков


@dataclass
class OptimizationResult:
    """Результат оптимизации"""
    layouts: List[CutLayout] = field(default_factory=list)
    total_waste: float = 0.0
    average_utilization: float = 0.0
    total_stock_used: int = 0
    total_cuts_needed: int = 0
    cuts_placed: int = 0
    message: str = ""
    optimization_time: float = field(default=0.0, compare=False)

    @property
    def success(self) -> bool:
        return bool(self.layouts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'layouts': [layout.to_dict() for layout in self.layouts],
            'totalWaste': self.total_waste,
            'averageUtilization': self.average_utilization,
            'totalStockUsed': self.total_stock_used,
            'totalCutsNeeded': self.total_cuts_needed,
            'cutsPlaced': self.cuts_placed,
            'message': self.message,
            'optimizationTime': self.optimization_time,
        }


def resolve_cutting_dimensions(cut: CutPiece) -> Tuple[float, float]:
    """
    Размер заготовки с учетом кромки.

    Толщина кромки вычитается с каждой отмеченной стороны: слева/справа
    из ширины, сверху/снизу из высоты. Результат не меньше 1 мм.
    """
    width = cut.width
    height = cut.height

    band = cut.edge_band
    if band is not None and band.thickness > 0:
        if band.left:
            width -= band.thickness
        if band.right:
            width -= band.thickness
        if band.top:
            height -= band.thickness
        if band.bottom:
            height -= band.thickness

    return max(MIN_CUT_DIMENSION, width), max(MIN_CUT_DIMENSION, height)


def _inflate(x: float, y: float, width: float, height: float, kerf: float) -> Tuple[float, float, float, float]:
    return x - kerf, y - kerf, x + width + kerf, y + height + kerf


def rects_intersect(rect1: Tuple[float, float, float, float], rect2: Tuple[float, float, float, float]) -> bool:
    """Пересечение прямоугольников (x, y, x2, y2); касание границами тоже пересечение"""
    return not (rect1[2] < rect2[0] or rect1[0] > rect2[2] or
                rect1[3] < rect2[1] or rect1[1] > rect2[3])


def can_place_piece(positions: List[CutPosition], x: float, y: float,
                    width: float, height: float, kerf: float) -> bool:
    """Проверка, что кандидат с пропилом не пересекает уже размещенные детали"""
    test_rect = _inflate(x, y, width, height, kerf)

    for pos in positions:
        existing_rect = _inflate(pos.x, pos.y, pos.width, pos.height, kerf)
        if rects_intersect(test_rect, existing_rect):
            return False

    return True


def _scan_positions(limit: float, step: float):
    index = 0
    while index * step <= limit:
        yield index * step
        index += 1


class GreedyOptimizer:
    """
    Жадный оптимизатор раскроя

    Каждый экземпляр листа получает полный список деталей; остаток спроса
    между листами не переносится.
    """

    def __init__(self, params: Optional[OptimizationParams] = None):
        self.params = params or OptimizationParams()
        if self.params.grid_step <= 0:
            raise ValueError(f"grid_step должен быть положительным: {self.params.grid_step}")
        self.progress_callback: Optional[Callable[[float], None]] = None

    def set_progress_callback(self, callback: Callable[[float], None]):
        """Установка callback для отслеживания прогресса"""
        self.progress_callback = callback

    def _report_progress(self, progress: float):
        """Отправка прогресса"""
        if self.progress_callback:
            self.progress_callback(progress)

    def _rotation_allowed(self, cut: CutPiece) -> bool:
        return self.params.rotation_mode != RotationMode.NONE and cut.can_rotate

    def _scan(self, positions: List[CutPosition], stock: StockPiece,
              width: float, height: float) -> Optional[Tuple[float, float]]:
        # Порядок обхода: x во внешнем цикле, y во внутреннем
        step = self.params.grid_step
        for x in _scan_positions(stock.width - width, step):
            for y in _scan_positions(stock.height - height, step):
                if can_place_piece(positions, x, y, width, height, self.params.kerf):
                    return x, y
        return None

    def find_placement(self, positions: List[CutPosition], stock: StockPiece, cut: CutPiece,
                       cutting_dims: Tuple[float, float]) -> Optional[CutPosition]:
        """Первая допустимая позиция детали на листе: сначала без поворота, затем с поворотом"""
        width, height = cutting_dims

        slot = self._scan(positions, stock, width, height)
        if slot is not None:
            return CutPosition(piece_id=cut.id, x=slot[0], y=slot[1],
                               width=width, height=height, rotated=False)

        if width != height and self._rotation_allowed(cut):
            slot = self._scan(positions, stock, height, width)
            if slot is not None:
                return CutPosition(piece_id=cut.id, x=slot[0], y=slot[1],
                                   width=height, height=width, rotated=True)

        return None

    def _prepare_demands(self, cuts: List[CutPiece]) -> List[Tuple[CutPiece, Tuple[float, float]]]:
        """Разворачивает количество в единичные детали, сортирует по убыванию площади"""
        demands = []
        for cut in cuts:
            dims = resolve_cutting_dimensions(cut)
            for _ in range(max(0, cut.quantity)):
                demands.append((cut, dims))

        # sort стабилен: при равной площади сохраняется входной порядок
        demands.sort(key=lambda item: item[1][0] * item[1][1], reverse=True)
        return demands

    def build_layout(self, stock: StockPiece, cuts: List[CutPiece]) -> CutLayout:
        """Раскладка деталей на одном экземпляре листа"""
        positions: List[CutPosition] = []
        used_area = 0.0

        for cut, dims in self._prepare_demands(cuts):
            placement = self.find_placement(positions, stock, cut, dims)
            if placement:
                positions.append(placement)
                used_area += placement.area

        stock_area = stock.area
        utilization_rate = (used_area / stock_area * 100) if stock_area > 0 else 0.0

        logger.debug(f"📋 Лист {stock.id} ({stock.width}x{stock.height}): размещено {len(positions)} деталей, "
                     f"использование {utilization_rate:.1f}%")

        return CutLayout(
            stock_id=stock.id,
            stock_width=stock.width,
            stock_height=stock.height,
            positions=positions,
            waste_area=stock_area - used_area,
            utilization_rate=utilization_rate,
        )

    def optimize(self, stock_pieces: List[StockPiece], cut_pieces: List[CutPiece]) -> OptimizationResult:
        """Основной метод оптимизации"""
        if not stock_pieces or not cut_pieces:
            return OptimizationResult()

        start_time = time.time()
        logger.info(f"🚀 Начинаем оптимизацию: {len(cut_pieces)} позиций деталей, {len(stock_pieces)} позиций листов, "
                    f"пропил {self.params.kerf}, шаг сетки {self.params.grid_step}")

        instances = [stock for stock in stock_pieces for _ in range(max(0, stock.quantity))]
        total_cuts_needed = sum(max(0, cut.quantity) for cut in cut_pieces)

        layouts: List[CutLayout] = []
        if self.params.max_workers > 1 and len(instances) > 1:
            # map возвращает результаты в порядке экземпляров листов
            with ThreadPoolExecutor(max_workers=self.params.max_workers) as executor:
                for index, layout in enumerate(executor.map(lambda s: self.build_layout(s, cut_pieces), instances)):
                    layouts.append(layout)
                    self._report_progress((index + 1) / len(instances) * 100.0)
        else:
            for index, stock in enumerate(instances):
                layouts.append(self.build_layout(stock, cut_pieces))
                self._report_progress((index + 1) / len(instances) * 100.0)

        result = self._calculate_final_result(stock_pieces, layouts, total_cuts_needed)
        result.optimization_time = time.time() - start_time

        logger.info(f"✅ Оптимизация завершена за {result.optimization_time:.2f}с")
        logger.info(f"📊 Результат: {result.message}")
        return result

    def _calculate_final_result(self, stock_pieces: List[StockPiece], layouts: List[CutLayout],
                                total_cuts_needed: int) -> OptimizationResult:
        """Сводная статистика по всем листам"""
        cuts_placed = sum(len(layout.positions) for layout in layouts)
        total_waste = sum(layout.waste_area for layout in layouts)
        total_stock_area = sum(stock.area * max(0, stock.quantity) for stock in stock_pieces)

        # Средняя загрузка взвешена по площади, а не по количеству листов
        average_utilization = ((total_stock_area - total_waste) / total_stock_area * 100) if total_stock_area > 0 else 0.0

        if not layouts:
            message = "Нет доступных листов для раскроя"
        elif cuts_placed >= total_cuts_needed * len(layouts):
            message = f"Все детали размещены на каждом из {len(layouts)} листов"
        else:
            message = f"Размещено {cuts_placed} деталей на {len(layouts)} листах, требуется {total_cuts_needed}"

        return OptimizationResult(
            layouts=layouts,
            total_waste=total_waste,
            average_utilization=average_utilization,
            total_stock_used=len(stock_pieces),
            total_cuts_needed=total_cuts_needed,
            cuts_placed=cuts_placed,
            message=message,
        )


# ========== ПРЕОБРАЗОВАНИЕ ИЗ СЛОВАРЕЙ (JSON, API) ==========

def _parse_pattern(data: Dict[str, Any]) -> Pattern:
    value = data.get('pattern') or data.get('grain') or Pattern.NONE.value
    return Pattern(value)


def edge_band_from_dict(data: Optional[Dict[str, Any]]) -> Optional[EdgeBand]:
    if not data:
        return None
    sides = data.get('sides', data)
    return EdgeBand(
        name=str(data.get('name', '')),
        thickness=float(data.get('thickness', 0)),
        top=bool(sides.get('top', False)),
        bottom=bool(sides.get('bottom', False)),
        left=bool(sides.get('left', False)),
        right=bool(sides.get('right', False)),
    )


def groove_from_dict(data: Optional[Dict[str, Any]]) -> Optional[Groove]:
    if not data:
        return None
    length_value = data.get('lengthValue', data.get('length_value'))
    offset_side = data.get('offsetSide', data.get('offset_side'))
    return Groove(
        enabled=bool(data.get('enabled', False)),
        width=float(data.get('width', 0)),
        direction=GrooveDirection(data.get('direction', GrooveDirection.HORIZONTAL.value)),
        length=GrooveLength(data.get('length') or GrooveLength.FULL.value),
        length_value=float(length_value) if length_value is not None else None,
        offset_side=Side(offset_side) if offset_side else None,
        offset=float(data.get('offset') or 0),
    )


def _non_negative(data: Dict[str, Any], key: str, convert: Callable[[Any], Any], default: Any = None):
    """Значение поля, не меньше нуля; ValueError для отрицательных"""
    value = convert(data[key] if default is None else data.get(key, default))
    if value < 0:
        raise ValueError(f"{key} не может быть отрицательным: {value}")
    return value


def stock_from_dict(data: Dict[str, Any], index: int = 0) -> StockPiece:
    """Лист из словаря; ValueError/KeyError при некорректных данных"""
    return StockPiece(
        id=str(data.get('id') or f"stock_{index + 1}"),
        name=str(data.get('name') or ''),
        width=_non_negative(data, 'width', float),
        height=_non_negative(data, 'height', float),
        quantity=_non_negative(data, 'quantity', int, 1),
        pattern=_parse_pattern(data),
    )


def cut_from_dict(data: Dict[str, Any], index: int = 0) -> CutPiece:
    """Деталь из словаря; ValueError/KeyError при некорректных данных"""
    return CutPiece(
        id=str(data.get('id') or f"cut_{index + 1}"),
        name=str(data.get('name') or ''),
        width=_non_negative(data, 'width', float),
        height=_non_negative(data, 'height', float),
        quantity=_non_negative(data, 'quantity', int, 1),
        pattern=_parse_pattern(data),
        edge_band=edge_band_from_dict(data.get('edgeBand', data.get('edge_band'))),
        groove=groove_from_dict(data.get('groove')),
    )


def params_from_dict(data: Optional[Dict[str, Any]]) -> OptimizationParams:
    """Параметры оптимизации из настроек (ключи как в DEFAULT_OPTIMIZATION_PARAMS)"""
    data = data or {}
    return OptimizationParams(
        kerf=float(data.get('kerf', DEFAULT_KERF)),
        grid_step=float(data.get('grid_step', DEFAULT_GRID_STEP)),
        rotation_mode=RotationMode.ALLOW_90 if data.get('allow_rotation', True) else RotationMode.NONE,
        max_workers=int(data.get('max_workers', 1)),
    )


def result_from_dict(data: Dict[str, Any]) -> OptimizationResult:
    """Восстановление результата из JSON (ответ API, сохраненный файл)"""
    layouts = []
    for layout_data in data.get('layouts', []):
        positions = [
            CutPosition(
                piece_id=str(pos['pieceId']),
                x=float(pos['x']),
                y=float(pos['y']),
                width=float(pos['width']),
                height=float(pos['height']),
                rotated=bool(pos.get('rotated', False)),
            )
            for pos in layout_data.get('positions', [])
        ]
        layouts.append(CutLayout(
            stock_id=str(layout_data['stockId']),
            stock_width=float(layout_data.get('stockWidth', 0)),
            stock_height=float(layout_data.get('stockHeight', 0)),
            positions=positions,
            waste_area=float(layout_data.get('wasteArea', 0)),
            utilization_rate=float(layout_data.get('utilizationRate', 0)),
        ))

    return OptimizationResult(
        layouts=layouts,
        total_waste=float(data.get('totalWaste', 0)),
        average_utilization=float(data.get('averageUtilization', 0)),
        total_stock_used=int(data.get('totalStockUsed', 0)),
        total_cuts_needed=int(data.get('totalCutsNeeded', 0)),
        cuts_placed=int(data.get('cutsPlaced', 0)),
        message=str(data.get('message', '')),
        optimization_time=float(data.get('optimizationTime', 0)),
    )


def optimize(stock_pieces: List[StockPiece], cut_pieces: List[CutPiece], kerf: float = DEFAULT_KERF,
             params: Optional[OptimizationParams] = None,
             progress_fn: Optional[Callable[[float], None]] = None) -> OptimizationResult:
    """
    Главная функция оптимизации

    Args:
        stock_pieces: листы на складе
        cut_pieces: требуемые детали
        kerf: ширина пропила (игнорируется, если переданы params)
        params: полный набор параметров оптимизации
        progress_fn: callback прогресса 0-100

    Returns:
        OptimizationResult
    """
    if params is None:
        params = OptimizationParams(kerf=kerf)

    optimizer = GreedyOptimizer(params)
    if progress_fn:
        optimizer.set_progress_callback(progress_fn)

    return optimizer.optimize(list(stock_pieces), list(cut_pieces))
