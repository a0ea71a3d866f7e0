"""
Configuration settings for the FreeCut optimization application
"""

import os

# API Configuration
API_URL = os.getenv('FREECUT_API_URL', 'http://localhost:8000')
API_TIMEOUT = int(os.getenv('FREECUT_API_TIMEOUT', '630'))  # больше серверного таймаута оптимизации (600 с)
HEALTH_TIMEOUT = 5  # секунд на проверку доступности сервера

# Optimization Settings
DEFAULT_OPTIMIZATION_PARAMS = {
    'kerf': 3.0,            # ширина пропила, мм
    'grid_step': 10.0,      # шаг сетки поиска позиции, мм (меньше - плотнее, но медленнее)
    'allow_rotation': True,
    'max_workers': 1,       # потоков для раскладки листов
}

# Application Settings
DEBUG = False
LOG_LEVEL = 'INFO'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
