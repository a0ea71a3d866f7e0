"""
Менеджер данных для приложения оптимизации раскроя

Хранит задание пользователя (листы, детали, параметры) и последний результат.
Кромка и паз задаются для каждой детали отдельно, общего "ожидающего"
состояния нет.
"""

import json
import logging
import threading
import time
import uuid
from dataclasses import replace
from typing import Any, Dict, List, Optional

from PyQt5.QtCore import QObject, pyqtSignal

from .config import DEFAULT_OPTIMIZATION_PARAMS
from .optimizer_core import (
    CutPiece, OptimizationResult, StockPiece, cut_from_dict, optimize, params_from_dict, stock_from_dict
)

logger = logging.getLogger(__name__)


def generate_id() -> str:
    """Уникальный идентификатор для листа или детали"""
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"


class DataManager(QObject):
    """Менеджер для работы с данными задания"""

    # Сигналы для thread-safe коммуникации
    data_changed_signal = pyqtSignal()
    optimization_progress_signal = pyqtSignal(float)
    optimization_result_signal = pyqtSignal(object)  # OptimizationResult
    optimization_error_signal = pyqtSignal(str)

    def __init__(self, params: Optional[Dict[str, Any]] = None):
        super().__init__()
        self.stock_pieces: List[StockPiece] = []
        self.cut_pieces: List[CutPiece] = []
        self.params: Dict[str, Any] = dict(DEFAULT_OPTIMIZATION_PARAMS)
        if params:
            self.params.update(params)
        self.optimization_result: Optional[OptimizationResult] = None
        self.is_optimizing = False

    # ========== ЛИСТЫ ==========

    def add_stock_piece(self, **fields) -> StockPiece:
        stock = StockPiece(id=generate_id(), **fields)
        self.stock_pieces.append(stock)
        self.data_changed_signal.emit()
        return stock

    def remove_stock_piece(self, piece_id: str):
        self.stock_pieces = [piece for piece in self.stock_pieces if piece.id != piece_id]
        self.data_changed_signal.emit()

    def update_stock_piece(self, piece_id: str, **updates):
        self.stock_pieces = [replace(piece, **updates) if piece.id == piece_id else piece
                             for piece in self.stock_pieces]
        self.data_changed_signal.emit()

    # ========== ДЕТАЛИ ==========

    def add_cut_piece(self, **fields) -> CutPiece:
        cut = CutPiece(id=generate_id(), **fields)
        self.cut_pieces.append(cut)
        self.data_changed_signal.emit()
        return cut

    def remove_cut_piece(self, piece_id: str):
        self.cut_pieces = [piece for piece in self.cut_pieces if piece.id != piece_id]
        self.data_changed_signal.emit()

    def update_cut_piece(self, piece_id: str, **updates):
        self.cut_pieces = [replace(piece, **updates) if piece.id == piece_id else piece
                           for piece in self.cut_pieces]
        self.data_changed_signal.emit()

    def get_cut_piece(self, piece_id: str) -> Optional[CutPiece]:
        for piece in self.cut_pieces:
            if piece.id == piece_id:
                return piece
        return None

    # ========== ОПТИМИЗАЦИЯ ==========

    def has_data(self):
        """Проверка наличия данных для оптимизации"""
        return bool(self.stock_pieces and self.cut_pieces)

    def has_optimization_result(self):
        return self.optimization_result is not None

    def run_optimization(self, progress_callback=None) -> OptimizationResult:
        """Синхронная оптимизация текущего задания"""
        result = optimize(
            self.stock_pieces,
            self.cut_pieces,
            params=params_from_dict(self.params),
            progress_fn=progress_callback,
        )
        self.optimization_result = result
        return result

    def run_optimization_async(self):
        """Оптимизация в отдельном потоке, результат приходит сигналом"""
        if not self.has_data():
            self.optimization_error_signal.emit("Добавьте хотя бы один лист и одну деталь")
            return None

        def run():
            try:
                self.is_optimizing = True
                result = self.run_optimization(self.optimization_progress_signal.emit)
                self.optimization_result_signal.emit(result)
            except Exception as e:
                logger.exception("Ошибка оптимизации")
                self.optimization_error_signal.emit(f"Ошибка оптимизации: {e}")
            finally:
                self.is_optimizing = False

        thread = threading.Thread(target=run, daemon=True)
        thread.start()
        return thread

    # ========== ФАЙЛЫ ЗАДАНИЙ ==========

    def to_job_dict(self) -> Dict[str, Any]:
        return {
            'stock': [stock.to_dict() for stock in self.stock_pieces],
            'cuts': [cut.to_dict() for cut in self.cut_pieces],
            'kerf': self.params.get('kerf'),
            'grid_step': self.params.get('grid_step'),
            'allow_rotation': self.params.get('allow_rotation', True),
        }

    def save_job(self, path: str):
        """Сохранение задания в JSON"""
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.to_job_dict(), f, ensure_ascii=False, indent=2)
        logger.info(f"💾 Задание сохранено: {path}")

    def load_job(self, path: str):
        """
        Загрузка задания из JSON

        Raises:
            OSError, ValueError, KeyError: файл не читается или данные некорректны
        """
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        stock_pieces = [stock_from_dict(item, i) for i, item in enumerate(data.get('stock', []))]
        cut_pieces = [cut_from_dict(item, i) for i, item in enumerate(data.get('cuts', []))]

        self.stock_pieces = stock_pieces
        self.cut_pieces = cut_pieces
        for key in ('kerf', 'grid_step', 'allow_rotation'):
            if data.get(key) is not None:
                self.params[key] = data[key]
        self.optimization_result = None

        logger.info(f"📂 Задание загружено: {path} ({len(stock_pieces)} листов, {len(cut_pieces)} деталей)")
        self.data_changed_signal.emit()

    def clear_data(self):
        """Очистка всех данных"""
        self.stock_pieces = []
        self.cut_pieces = []
        self.optimization_result = None
        self.data_changed_signal.emit()
