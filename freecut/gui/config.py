"""
Конфигурация и константы для приложения оптимизации раскроя
"""

# Стили для приложения
DARK_THEME_STYLE = """
    QWidget {
        background-color: #2b2b2b;
        color: #ffffff;
        font-family: 'Segoe UI', Arial, sans-serif;
        font-size: 9pt;
    }

    QTabBar::tab {
        background-color: #404040;
        padding: 10px 20px;
        border-top-left-radius: 8px;
        border-top-right-radius: 8px;
        font-weight: bold;
    }

    QTabBar::tab:selected {
        background-color: #d97706;
    }

    QGroupBox {
        font-weight: bold;
        border: 2px solid #555555;
        border-radius: 8px;
        margin-top: 10px;
        padding-top: 15px;
        background-color: #333333;
    }

    QGroupBox::title {
        subcontrol-origin: margin;
        left: 10px;
        padding: 0 10px;
    }

    QTableWidget {
        background-color: #1e1e1e;
        gridline-color: #555555;
        selection-background-color: #d97706;
        alternate-background-color: #262626;
    }

    QHeaderView::section {
        background-color: #404040;
        padding: 6px;
        border: none;
        font-weight: bold;
    }

    QPushButton {
        background-color: #d97706;
        color: white;
        border: none;
        padding: 8px 16px;
        border-radius: 4px;
        font-weight: bold;
    }

    QPushButton:hover {
        background-color: #b45309;
    }

    QPushButton:disabled {
        background-color: #666666;
        color: #999999;
    }

    QLineEdit, QSpinBox, QDoubleSpinBox, QComboBox {
        background-color: #1e1e1e;
        border: 2px solid #555555;
        border-radius: 4px;
        padding: 4px;
    }

    QGraphicsView {
        background-color: #1e1e1e;
        border: 2px solid #555555;
    }
"""

# Стили для диалогов
DIALOG_STYLE = """
    QDialog {
        background-color: #2b2b2b;
        color: #ffffff;
    }
    QLabel, QCheckBox {
        color: #ffffff;
    }
    QPushButton {
        background-color: #d97706;
        color: white;
        border: none;
        padding: 6px 14px;
        border-radius: 4px;
        min-width: 80px;
    }
    QProgressBar {
        background-color: #404040;
        border: 2px solid #555555;
        border-radius: 4px;
        text-align: center;
        color: #ffffff;
    }
    QProgressBar::chunk {
        background-color: #d97706;
    }
"""

# Размеры окна
WINDOW_MIN_WIDTH = 1200
WINDOW_MIN_HEIGHT = 800

# Ограничения ввода
INPUT_LIMITS = {
    'dimension_max': 10000,
    'quantity_max': 1000,
    'kerf_max': 50,
    'edge_band_max': 10,
}

# Настройки таблиц
TABLE_HEADERS = {
    'stock': ['Название', 'Ширина, мм', 'Высота, мм', 'Кол-во', 'Текстура'],
    'cuts': ['Название', 'Ширина, мм', 'Высота, мм', 'Кол-во', 'Текстура', 'Кромка', 'Паз'],
    'layouts': ['Лист', 'Деталей', 'Использование, %', 'Отходы, мм²'],
}

PATTERN_LABELS = {
    'none': 'Нет',
    'horizontal': 'Горизонтальная',
    'vertical': 'Вертикальная',
}

# Настройки визуализации
VISUALIZATION_DEFAULTS = {
    'fit_margin': 0.9,     # доля области просмотра под лист
    'grid_size': 100,      # мм
}

# Цвета для визуализации
COLORS = {
    'sheet_border': '#ffffff',
    'sheet_fill': '#2a2a2a',
    'detail_border': '#1f2937',
    'waste_fill': '#ef4444',
    'groove': '#111827',
    'grid': '#444444',
    'text': '#111827',
}

# Палитра деталей по порядку размещения (по кругу)
PIECE_PALETTE = [
    '#F59E0B',
    '#3B82F6',
    '#10B981',
    '#8B5CF6',
    '#EC4899',
    '#F97316',
]
