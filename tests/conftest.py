"""Общие фикстуры тестов"""

import pytest

from freecut.core.optimizer_core import CutPiece, EdgeBand, Pattern, StockPiece, optimize


@pytest.fixture
def square_stock() -> StockPiece:
    """Лист 1000x1000, одна штука"""
    return StockPiece(id="stock_1", width=1000, height=1000, quantity=1)


@pytest.fixture
def two_rectangles() -> CutPiece:
    """Две детали 400x300 без кромки и текстуры"""
    return CutPiece(id="cut_1", width=400, height=300, quantity=2)


@pytest.fixture
def banded_square() -> CutPiece:
    """Деталь 500x500 с кромкой 2 мм со всех сторон"""
    band = EdgeBand(name="ПВХ", thickness=2, top=True, bottom=True, left=True, right=True)
    return CutPiece(id="cut_band", width=500, height=500, quantity=1, edge_band=band)


@pytest.fixture
def vertical_grain_cut() -> CutPiece:
    return CutPiece(id="cut_grain", width=60, height=90, quantity=1, pattern=Pattern.VERTICAL)


@pytest.fixture
def basic_result(square_stock, two_rectangles):
    """Результат базового сценария: 24% загрузки, отходы 760000"""
    return optimize([square_stock], [two_rectangles], 3)


@pytest.fixture
def job_dict():
    return {
        "stock": [{"id": "sheet", "name": "ЛДСП", "width": 1000, "height": 1000, "quantity": 1}],
        "cuts": [{"id": "door", "name": "Фасад", "width": 400, "height": 300, "quantity": 2}],
        "kerf": 3,
        "grid_step": 10,
        "allow_rotation": True,
    }
