import asyncio
import logging
import time
from concurrent.futures import ThreadPoolExecutor

import uvicorn
from fastapi import FastAPI, HTTPException

from . import __version__
from .config import API_HOST, API_PORT, API_TIMEOUT, MAX_WORKERS, ENABLE_DETAILED_LOGGING, LOG_LEVEL
from .models import OptimizeRequest
from .routes import router, run_job

logger = logging.getLogger(__name__)

app = FastAPI(title="FreeCut Optimization API", version=__version__)
app.include_router(router)

# Создаем пул потоков для выполнения блокирующих операций
executor = ThreadPoolExecutor(max_workers=MAX_WORKERS)


@app.post("/optimize")
async def optimize_job(request: OptimizeRequest):
    """
    Оптимизация раскроя

    Раскладка выполняется в пуле потоков с таймаутом API_TIMEOUT.
    При превышении таймаута клиент получает 504, расчет не прерывается.
    """
    start_time = time.time()

    logger.info(f"🔄 API: Начало оптимизации: {len(request.stock)} позиций листов, "
                f"{len(request.cuts)} позиций деталей, пропил {request.kerf}, шаг {request.grid_step}")

    if ENABLE_DETAILED_LOGGING:
        for i, stock in enumerate(request.stock):
            logger.info(f"   Лист {i + 1}: {stock.id or '-'} {stock.width}x{stock.height}, qty={stock.quantity}, "
                        f"текстура={stock.pattern.value}")

    try:
        loop = asyncio.get_running_loop()
        future = loop.run_in_executor(executor, run_job, request)
        result = await asyncio.wait_for(future, timeout=API_TIMEOUT)

    except asyncio.TimeoutError:
        execution_time = time.time() - start_time
        error_msg = f"Превышен таймаут оптимизации ({API_TIMEOUT} секунд). " \
                    f"Операция выполнялась {execution_time:.2f} секунд."
        logger.error(f"❌ API: {error_msg}")
        raise HTTPException(status_code=504, detail=error_msg)
    except Exception as e:
        execution_time = time.time() - start_time
        logger.exception(f"❌ API: Ошибка оптимизации за {execution_time:.2f} секунд")
        raise HTTPException(status_code=500, detail=f"Ошибка оптимизации: {e}")

    execution_time = time.time() - start_time
    logger.info(f"✅ API: Оптимизация завершена за {execution_time:.2f} секунд, листов: {len(result.layouts)}, "
                f"размещено деталей: {result.cuts_placed}")
    return result.to_dict()


def run():
    """Запуск сервера (точка входа freecut-api)"""
    logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    uvicorn.run(app, host=API_HOST, port=API_PORT)


if __name__ == "__main__":
    import multiprocessing
    multiprocessing.freeze_support()
    run()
