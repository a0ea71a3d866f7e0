"""
Configuration module for API server
"""

import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Server settings
API_HOST = os.getenv('API_HOST', '0.0.0.0')
API_PORT = int(os.getenv('API_PORT', '8000'))

# Optimization settings
API_TIMEOUT = int(os.getenv('API_TIMEOUT', '600'))  # 10 минут на одну оптимизацию
MAX_WORKERS = int(os.getenv('MAX_WORKERS', '5'))    # потоков для блокирующих вызовов
DEFAULT_KERF = float(os.getenv('DEFAULT_KERF', '3'))
DEFAULT_GRID_STEP = float(os.getenv('DEFAULT_GRID_STEP', '10'))

# Debug settings
ENABLE_DETAILED_LOGGING = os.getenv('ENABLE_DETAILED_LOGGING', 'true').lower() == 'true'
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
