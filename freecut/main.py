#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Точка входа в приложение оптимизации раскроя
Минимальная реализация - только запуск приложения
"""

import sys
import logging

from .core.config import LOG_LEVEL, LOG_FORMAT, DEBUG


def main():
    """Главная функция - точка входа в приложение"""
    logging.basicConfig(level=logging.DEBUG if DEBUG else LOG_LEVEL, format=LOG_FORMAT)
    logger = logging.getLogger(__name__)

    try:
        from PyQt5.QtWidgets import QApplication
        from .gui.main_window import OptimizerWindow

        app = QApplication(sys.argv)
        window = OptimizerWindow()
        # Если передан аргумент командной строки - путь к файлу задания,
        # автоматически загружаем его
        if len(sys.argv) > 1:
            window.open_job(sys.argv[1])

        window.showMaximized()

        sys.exit(app.exec_())

    except ImportError:
        logger.exception("Import Error")
        sys.exit(1)


if __name__ == "__main__":
    main()
