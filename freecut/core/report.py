"""
Текстовый отчет по результату оптимизации
"""

import logging
from typing import List

from .optimizer_core import OptimizationResult

logger = logging.getLogger(__name__)

REPORT_TITLE = "FreeCut Optimization Report"


def generate_report(result: OptimizationResult) -> str:
    """Сводка по всему раскрою и блок на каждый лист"""
    lines: List[str] = [
        REPORT_TITLE,
        "=" * len(REPORT_TITLE),
        "",
        f"Total Stock Used: {result.total_stock_used}",
        f"Total Cuts Needed: {result.total_cuts_needed}",
        f"Cuts Placed: {result.cuts_placed}",
        f"Average Utilization: {result.average_utilization:.2f}%",
        f"Total Waste: {result.total_waste:.2f} units²",
        "",
    ]

    for index, layout in enumerate(result.layouts, start=1):
        lines.append(f"Layout {index}:")
        lines.append(f"Utilization: {layout.utilization_rate:.2f}%")
        lines.append(f"Waste: {layout.waste_area:.2f} units²")
        lines.append(f"Pieces: {len(layout.positions)}")
        lines.append("")

    return "\n".join(lines) + "\n"


def export_report_file(result: OptimizationResult, path: str) -> str:
    """Сохранение отчета в файл, возвращает путь"""
    with open(path, 'w', encoding='utf-8') as f:
        f.write(generate_report(result))
    logger.info(f"📄 Отчет сохранен: {path}")
    return path
