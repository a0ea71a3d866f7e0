"""
Пакетная оптимизация задания из JSON файла.

Формат задания:
  {"stock": [{"width": 2800, "height": 2070, "quantity": 1}],
   "cuts": [{"width": 600, "height": 400, "quantity": 4, "pattern": "vertical"}],
   "kerf": 3, "grid_step": 10, "allow_rotation": true}

Примеры запуска:
  freecut-optimize job.json
  freecut-optimize job.json --kerf 4 --report out.txt --dxf out.dxf
  freecut-optimize job.json --remote --json result.json
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from ..core import api_client
from ..core.config import DEFAULT_OPTIMIZATION_PARAMS, LOG_FORMAT, LOG_LEVEL
from ..core.dxf_export import export_dxf_file
from ..core.optimizer_core import cut_from_dict, optimize, params_from_dict, stock_from_dict
from ..core.report import export_report_file, generate_report

logger = logging.getLogger(__name__)


def load_job(path: str, kerf: Optional[float] = None, grid_step: Optional[float] = None):
    """
    Чтение задания; параметры командной строки имеют приоритет над файлом

    Raises:
        OSError, ValueError, KeyError, TypeError: файл не читается или данные некорректны
    """
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    stock = [stock_from_dict(item, i) for i, item in enumerate(data.get('stock', []))]
    cuts = [cut_from_dict(item, i) for i, item in enumerate(data.get('cuts', []))]

    settings = dict(DEFAULT_OPTIMIZATION_PARAMS)
    for key in ('kerf', 'grid_step', 'allow_rotation'):
        if data.get(key) is not None:
            settings[key] = data[key]
    if kerf is not None:
        settings['kerf'] = kerf
    if grid_step is not None:
        settings['grid_step'] = grid_step

    params = params_from_dict(settings)
    if params.kerf < 0 or params.grid_step <= 0:
        raise ValueError(f"Некорректные параметры: пропил {params.kerf}, шаг {params.grid_step}")
    return stock, cuts, params


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="freecut-optimize", description="Оптимизация раскроя панелей из JSON задания")
    parser.add_argument("job", help="Путь к JSON файлу задания")
    parser.add_argument("--kerf", type=float, default=None, help="Ширина пропила (перекрывает значение из файла)")
    parser.add_argument("--grid-step", type=float, default=None, help="Шаг сетки поиска позиции")
    parser.add_argument("--report", metavar="PATH", help="Сохранить текстовый отчет")
    parser.add_argument("--dxf", metavar="PATH", help="Сохранить раскладки в DXF")
    parser.add_argument("--json", metavar="PATH", dest="json_path", help="Сохранить результат в JSON")
    parser.add_argument("--remote", action="store_true", help="Считать на сервере (FREECUT_API_URL)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)

    try:
        stock, cuts, params = load_job(args.job, args.kerf, args.grid_step)
    except (OSError, ValueError, KeyError, TypeError) as e:
        logger.error(f"❌ Некорректное задание {args.job}: {e}")
        return 1

    if args.remote:
        if not api_client.check_api_connection():
            logger.error(f"❌ Сервер оптимизации недоступен: {api_client.API_URL}")
            return 1
        result = api_client.optimize_remote(stock, cuts, params)
        if result is None:
            logger.error("❌ Сервер оптимизации не вернул результат")
            return 1
    else:
        result = optimize(stock, cuts, params=params)

    try:
        if args.report:
            export_report_file(result, args.report)
        if args.dxf:
            export_dxf_file(result, args.dxf)
        if args.json_path:
            with open(args.json_path, 'w', encoding='utf-8') as f:
                json.dump(result.to_dict(), f, ensure_ascii=False, indent=2)
            logger.info(f"💾 Результат сохранен: {args.json_path}")
    except OSError as e:
        logger.error(f"❌ Ошибка записи результата: {e}")
        return 1

    if not (args.report or args.dxf or args.json_path):
        sys.stdout.write(generate_report(result))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
