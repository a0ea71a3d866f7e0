#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Клиентская часть приложения оптимизации раскроя панелей FreeCut

Этот пакет содержит:
- core: Алгоритм раскладки, экспорт отчетов и DXF, работа с API
- gui: Графический интерфейс пользователя
- tools: Пакетная обработка заданий из командной строки
"""

__version__ = "1.0.0"
__author__ = "FreeCut Team"

# Экспорт ядра без зависимости от PyQt5
from .core.optimizer_core import optimize, OptimizationResult

__all__ = [
    'optimize',
    'OptimizationResult'
]
