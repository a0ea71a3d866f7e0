"""
API клиент для взаимодействия с сервером оптимизации
"""

import logging
from typing import List, Optional

import requests

from .config import API_URL, API_TIMEOUT, HEALTH_TIMEOUT
from .optimizer_core import (
    CutPiece, OptimizationParams, OptimizationResult, RotationMode, StockPiece, result_from_dict
)

logger = logging.getLogger(__name__)


def check_api_connection():
    """Проверка доступности API"""
    try:
        response = requests.get(f"{API_URL}/health", timeout=HEALTH_TIMEOUT)
        return response.status_code == 200
    except requests.exceptions.RequestException as e:
        logger.warning(f"API connection error: {e}")
        return False


def api_request(endpoint, data=None, method='GET', expect_json=True):
    """Универсальная функция для API запросов; None при любой ошибке"""
    url = f"{API_URL}/{endpoint.lstrip('/')}"

    try:
        if method == 'POST':
            response = requests.post(url, json=data, timeout=API_TIMEOUT)
        else:
            response = requests.get(url, timeout=API_TIMEOUT)

        response.raise_for_status()

        if not expect_json:
            return response.text

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"JSON decode error: {e}")
            return None

    except requests.exceptions.Timeout:
        logger.error(f"❌ API: Таймаут запроса {url}")
        return None
    except requests.exceptions.ConnectionError:
        logger.error(f"❌ API: Не удается подключиться к серверу {API_URL}")
        return None
    except requests.exceptions.RequestException as e:
        logger.error(f"❌ API: Ошибка запроса {url}: {e}")
        return None


def build_job_payload(stock_pieces: List[StockPiece], cut_pieces: List[CutPiece],
                      params: Optional[OptimizationParams] = None) -> dict:
    """Тело запроса для эндпоинтов /optimize и /export/*"""
    params = params or OptimizationParams()
    return {
        'stock': [stock.to_dict() for stock in stock_pieces],
        'cuts': [cut.to_dict() for cut in cut_pieces],
        'kerf': params.kerf,
        'grid_step': params.grid_step,
        'allow_rotation': params.rotation_mode != RotationMode.NONE,
    }


def optimize_remote(stock_pieces: List[StockPiece], cut_pieces: List[CutPiece],
                    params: Optional[OptimizationParams] = None) -> Optional[OptimizationResult]:
    """Оптимизация на сервере; None если сервер не ответил"""
    payload = build_job_payload(stock_pieces, cut_pieces, params)
    logger.info(f"🔄 API: Отправка задания: {len(payload['stock'])} листов, {len(payload['cuts'])} деталей")

    data = api_request('optimize', payload, 'POST')
    if data is None:
        return None

    result = result_from_dict(data)
    logger.info(f"✅ API: Получен результат, листов: {len(result.layouts)}")
    return result


def get_report_remote(stock_pieces: List[StockPiece], cut_pieces: List[CutPiece],
                      params: Optional[OptimizationParams] = None) -> Optional[str]:
    """Текстовый отчет, сформированный сервером"""
    payload = build_job_payload(stock_pieces, cut_pieces, params)
    return api_request('export/report', payload, 'POST', expect_json=False)


def get_dxf_remote(stock_pieces: List[StockPiece], cut_pieces: List[CutPiece],
                   params: Optional[OptimizationParams] = None) -> Optional[str]:
    """DXF, сформированный сервером"""
    payload = build_job_payload(stock_pieces, cut_pieces, params)
    return api_request('export/dxf', payload, 'POST', expect_json=False)
