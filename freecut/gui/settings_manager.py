"""
Менеджер настроек для приложения оптимизации раскроя
Позволяет сохранять и загружать пользовательские настройки по умолчанию
"""

import json
import logging
import os
from typing import Dict, Any

from ..core.config import DEFAULT_OPTIMIZATION_PARAMS

logger = logging.getLogger(__name__)


class SettingsManager:
    """Класс для управления настройками пользователя"""

    def __init__(self, settings_file: str = "user_settings.json"):
        """
        Инициализация менеджера настроек

        Args:
            settings_file: Путь к файлу настроек
        """
        self.settings_file = settings_file
        self.default_settings = dict(DEFAULT_OPTIMIZATION_PARAMS)
        self.default_settings['last_job_dir'] = ''

    def load_settings(self) -> Dict[str, Any]:
        """
        Загрузка настроек из файла

        Returns:
            Словарь с настройками или значения по умолчанию
        """
        try:
            if os.path.exists(self.settings_file):
                with open(self.settings_file, 'r', encoding='utf-8') as f:
                    settings = json.load(f)
                # Объединяем с дефолтными настройками на случай, если в файле нет всех параметров
                merged_settings = self.default_settings.copy()
                merged_settings.update(settings)
                return merged_settings
            return self.default_settings.copy()
        except (OSError, ValueError) as e:
            logger.warning(f"Ошибка при загрузке настроек: {e}")
            return self.default_settings.copy()

    def save_settings(self, settings: Dict[str, Any]) -> bool:
        """
        Сохранение настроек в файл

        Returns:
            True если сохранение прошло успешно, False в противном случае
        """
        try:
            directory = os.path.dirname(self.settings_file)
            if directory:
                os.makedirs(directory, exist_ok=True)

            with open(self.settings_file, 'w', encoding='utf-8') as f:
                json.dump(settings, f, ensure_ascii=False, indent=2)
            return True
        except (OSError, TypeError) as e:
            logger.error(f"Ошибка при сохранении настроек: {e}")
            return False

    def get_default_settings(self) -> Dict[str, Any]:
        return self.default_settings.copy()
