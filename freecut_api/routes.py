import logging
import time

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse, Response

from freecut.core.dxf_export import generate_dxf
from freecut.core.optimizer_core import optimize
from freecut.core.report import generate_report

from . import __version__
from .models import OptimizeRequest

logger = logging.getLogger(__name__)

router = APIRouter()

DXF_FILENAME = "freecut-layout.dxf"


def run_job(request: OptimizeRequest):
    """Синхронная оптимизация задания из запроса"""
    stock, cuts, params = request.to_job()
    return optimize(stock, cuts, params=params)


@router.get("/health")
def health():
    return {"status": "ok", "version": __version__}


@router.post("/export/report", response_class=PlainTextResponse)
def export_report(request: OptimizeRequest):
    """
    Текстовый отчет по результату оптимизации
    """
    start_time = time.time()
    result = run_job(request)
    logger.info(f"📄 API: Отчет сформирован за {time.time() - start_time:.2f}с, листов: {len(result.layouts)}")
    return PlainTextResponse(generate_report(result))


@router.post("/export/dxf")
def export_dxf(request: OptimizeRequest):
    """
    DXF со всеми раскладками (листы подряд по оси X)
    """
    start_time = time.time()
    result = run_job(request)
    logger.info(f"📐 API: DXF сформирован за {time.time() - start_time:.2f}с, листов: {len(result.layouts)}")
    return Response(
        content=generate_dxf(result),
        media_type="application/dxf",
        headers={"Content-Disposition": f'attachment; filename="{DXF_FILENAME}"'},
    )
