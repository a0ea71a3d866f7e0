"""
Основная логика приложения оптимизации раскроя
"""

from .optimizer_core import (
    optimize, OptimizationResult, OptimizationParams, StockPiece, CutPiece,
    EdgeBand, Groove, CutPosition, CutLayout
)
from .report import generate_report
from .dxf_export import generate_dxf

__all__ = [
    "optimize", "OptimizationResult", "OptimizationParams", "StockPiece", "CutPiece",
    "EdgeBand", "Groove", "CutPosition", "CutLayout", "generate_report", "generate_dxf"
]
