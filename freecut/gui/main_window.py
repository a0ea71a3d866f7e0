"""
Главное окно приложения оптимизации раскроя
"""

import logging
import os

from PyQt5.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QFormLayout, QGridLayout, QGroupBox, QTabWidget,
    QTableWidget, QPushButton, QLabel, QDoubleSpinBox, QCheckBox, QComboBox, QSplitter,
    QFileDialog, QGraphicsScene
)
from PyQt5.QtCore import Qt

from ..core.data_manager import DataManager
from ..core.dxf_export import export_dxf_file
from ..core.report import export_report_file
from .config import DARK_THEME_STYLE, WINDOW_MIN_WIDTH, WINDOW_MIN_HEIGHT, INPUT_LIMITS
from .dialogs import ProgressDialog, PieceDialog, EdgeBandDialog, GrooveDialog, show_centered_message
from .settings_manager import SettingsManager
from .table_widgets import (
    setup_table, selected_piece_id, fill_stock_table, fill_cuts_table, fill_layouts_table
)
from .visualization_widgets import ZoomableGraphicsView, VisualizationManager

logger = logging.getLogger(__name__)

JOB_FILE_FILTER = "Задание FreeCut (*.json)"


class OptimizerWindow(QWidget):
    """Главное окно приложения"""

    def __init__(self, settings_manager=None):
        super().__init__()

        self.settings_manager = settings_manager or SettingsManager()
        self.settings = self.settings_manager.load_settings()
        self.data_manager = DataManager(params={
            key: self.settings[key] for key in ('kerf', 'grid_step', 'allow_rotation', 'max_workers')
        })
        self.progress_dialog = None

        self.init_ui()

        self.setWindowTitle("FreeCut - Оптимизатор раскроя панелей")
        self.setMinimumSize(WINDOW_MIN_WIDTH, WINDOW_MIN_HEIGHT)

        # Сигналы менеджера данных приходят из рабочего потока
        self.data_manager.data_changed_signal.connect(self.refresh_tables)
        self.data_manager.optimization_progress_signal.connect(self._update_progress)
        self.data_manager.optimization_result_signal.connect(self._handle_optimization_result)
        self.data_manager.optimization_error_signal.connect(self._handle_optimization_error)

        self.refresh_tables()

    def init_ui(self):
        """Инициализация интерфейса"""
        main_layout = QVBoxLayout(self)
        main_layout.setContentsMargins(10, 10, 10, 10)
        self.setStyleSheet(DARK_THEME_STYLE)

        self.tabs = QTabWidget()
        self.tabs.addTab(self.create_job_tab(), "📋 Задание")
        self.tabs.addTab(self.create_results_tab(), "📊 Результаты")
        main_layout.addWidget(self.tabs)

    # ========== ВКЛАДКА ЗАДАНИЯ ==========

    def create_job_tab(self):
        job_tab = QWidget()
        layout = QVBoxLayout(job_tab)

        file_layout = QHBoxLayout()
        for text, handler in (("📂 Открыть задание", self.on_open_job_clicked),
                              ("💾 Сохранить задание", self.on_save_job_clicked),
                              ("🧹 Очистить", self.on_clear_clicked)):
            button = QPushButton(text)
            button.clicked.connect(handler)
            file_layout.addWidget(button)
        file_layout.addStretch()
        layout.addLayout(file_layout)

        tables_splitter = QSplitter(Qt.Horizontal)
        tables_splitter.addWidget(self.create_stock_group())
        tables_splitter.addWidget(self.create_cuts_group())
        layout.addWidget(tables_splitter, stretch=1)

        layout.addWidget(self.create_optimization_params_group())
        return job_tab

    def create_stock_group(self):
        """Группа листов на складе"""
        group = QGroupBox("Листы")
        layout = QVBoxLayout()

        self.stock_table = QTableWidget()
        setup_table(self.stock_table, 'stock')
        self.stock_table.doubleClicked.connect(self.on_edit_stock_clicked)
        layout.addWidget(self.stock_table)

        buttons = QHBoxLayout()
        for text, handler in (("➕ Добавить", self.on_add_stock_clicked),
                              ("✏️ Изменить", self.on_edit_stock_clicked),
                              ("🗑 Удалить", self.on_remove_stock_clicked)):
            button = QPushButton(text)
            button.clicked.connect(handler)
            buttons.addWidget(button)
        layout.addLayout(buttons)

        group.setLayout(layout)
        return group

    def create_cuts_group(self):
        """Группа деталей"""
        group = QGroupBox("Детали")
        layout = QVBoxLayout()

        self.cuts_table = QTableWidget()
        setup_table(self.cuts_table, 'cuts')
        self.cuts_table.doubleClicked.connect(self.on_edit_cut_clicked)
        layout.addWidget(self.cuts_table)

        buttons = QHBoxLayout()
        for text, handler in (("➕ Добавить", self.on_add_cut_clicked),
                              ("✏️ Изменить", self.on_edit_cut_clicked),
                              ("🗑 Удалить", self.on_remove_cut_clicked),
                              ("Кромка...", self.on_edge_band_clicked),
                              ("Паз...", self.on_groove_clicked)):
            button = QPushButton(text)
            button.clicked.connect(handler)
            buttons.addWidget(button)
        layout.addLayout(buttons)

        group.setLayout(layout)
        return group

    def create_optimization_params_group(self):
        """Создание группы параметров оптимизации"""
        params_group = QGroupBox("Параметры оптимизации")
        layout = QHBoxLayout()
        form = QFormLayout()

        self.kerf_spin = QDoubleSpinBox()
        self.kerf_spin.setRange(0, INPUT_LIMITS['kerf_max'])
        self.kerf_spin.setDecimals(1)
        self.kerf_spin.setValue(float(self.settings['kerf']))
        self.kerf_spin.setSuffix(" мм")
        form.addRow("Ширина пропила:", self.kerf_spin)

        self.grid_step_spin = QDoubleSpinBox()
        self.grid_step_spin.setRange(1, 100)
        self.grid_step_spin.setDecimals(1)
        self.grid_step_spin.setValue(float(self.settings['grid_step']))
        self.grid_step_spin.setSuffix(" мм")
        self.grid_step_spin.setToolTip("Меньший шаг дает более плотную раскладку, но считается дольше")
        form.addRow("Шаг поиска позиции:", self.grid_step_spin)

        self.allow_rotation = QCheckBox("Разрешить поворот деталей без текстуры")
        self.allow_rotation.setChecked(bool(self.settings['allow_rotation']))
        form.addRow(self.allow_rotation)
        layout.addLayout(form)

        buttons = QVBoxLayout()
        save_defaults_button = QPushButton("Сохранить как настройки по умолчанию")
        save_defaults_button.clicked.connect(self.on_save_defaults_clicked)
        buttons.addWidget(save_defaults_button)

        self.optimize_button = QPushButton("🚀 Запустить оптимизацию")
        self.optimize_button.clicked.connect(self.on_optimize_clicked)
        self.optimize_button.setStyleSheet("QPushButton { background-color: #28a745; font-size: 11pt; }")
        buttons.addWidget(self.optimize_button)
        layout.addLayout(buttons)

        params_group.setLayout(layout)
        return params_group

    # ========== ВКЛАДКА РЕЗУЛЬТАТОВ ==========

    def create_results_tab(self):
        """Создание вкладки результатов оптимизации"""
        results_tab = QWidget()
        layout = QVBoxLayout(results_tab)

        layout.addWidget(self.create_statistics_group())

        splitter = QSplitter(Qt.Horizontal)

        self.layouts_table = QTableWidget()
        setup_table(self.layouts_table, 'layouts')
        self.layouts_table.cellClicked.connect(lambda row, _col: self.sheets_combo.setCurrentIndex(row))
        splitter.addWidget(self.layouts_table)
        splitter.addWidget(self.create_visualization_group())
        splitter.setSizes([350, 900])
        layout.addWidget(splitter, stretch=1)

        export_layout = QHBoxLayout()
        export_layout.addStretch()
        self.export_report_button = QPushButton("📄 Экспорт отчета")
        self.export_report_button.clicked.connect(self.on_export_report_clicked)
        export_layout.addWidget(self.export_report_button)
        self.export_dxf_button = QPushButton("📐 Экспорт DXF (все листы)")
        self.export_dxf_button.clicked.connect(lambda: self.on_export_dxf_clicked(current_only=False))
        export_layout.addWidget(self.export_dxf_button)
        self.export_sheet_dxf_button = QPushButton("📐 Экспорт DXF (текущий лист)")
        self.export_sheet_dxf_button.clicked.connect(lambda: self.on_export_dxf_clicked(current_only=True))
        export_layout.addWidget(self.export_sheet_dxf_button)
        layout.addLayout(export_layout)

        self._set_export_enabled(False)
        return results_tab

    def create_statistics_group(self):
        group = QGroupBox("Статистика")
        grid = QGridLayout()

        self.stats_labels = {}
        captions = (
            ('stock_used', "Позиций листов:"),
            ('cuts_needed', "Требуется деталей:"),
            ('cuts_placed', "Размещено деталей:"),
            ('utilization', "Средняя загрузка:"),
            ('waste', "Общие отходы:"),
            ('sheet', "Текущий лист:"),
        )
        for i, (key, caption) in enumerate(captions):
            grid.addWidget(QLabel(caption), i // 3, (i % 3) * 2)
            value_label = QLabel("-")
            value_label.setStyleSheet("font-weight: bold; color: #f59e0b;")
            grid.addWidget(value_label, i // 3, (i % 3) * 2 + 1)
            self.stats_labels[key] = value_label

        group.setLayout(grid)
        return group

    def create_visualization_group(self):
        group = QGroupBox("Раскладка")
        layout = QVBoxLayout()

        navigation = QHBoxLayout()
        self.prev_sheet_btn = QPushButton("◀")
        self.sheets_combo = QComboBox()
        self.next_sheet_btn = QPushButton("▶")
        navigation.addWidget(self.prev_sheet_btn)
        navigation.addWidget(self.sheets_combo, stretch=1)
        navigation.addWidget(self.next_sheet_btn)
        layout.addLayout(navigation)

        self.graphics_scene = QGraphicsScene()
        self.graphics_view = ZoomableGraphicsView(self.graphics_scene)
        layout.addWidget(self.graphics_view)

        self.visualization = VisualizationManager(self.graphics_view, self.graphics_scene)
        self.visualization.setup_navigation(self.sheets_combo, self.prev_sheet_btn, self.next_sheet_btn)
        self.visualization.set_sheet_changed_callback(self._update_current_sheet_label)

        group.setLayout(layout)
        return group

    # ========== ОБРАБОТЧИКИ ЗАДАНИЯ ==========

    def refresh_tables(self):
        fill_stock_table(self.stock_table, self.data_manager.stock_pieces)
        fill_cuts_table(self.cuts_table, self.data_manager.cut_pieces)
        self.optimize_button.setEnabled(self.data_manager.has_data() and not self.data_manager.is_optimizing)

    def _find_stock(self, piece_id):
        return next((s for s in self.data_manager.stock_pieces if s.id == piece_id), None)

    def on_add_stock_clicked(self):
        dialog = PieceDialog(self, "Новый лист", width=2800, height=2070)
        if dialog.exec_():
            self.data_manager.add_stock_piece(**dialog.get_values())

    def on_edit_stock_clicked(self, *_):
        stock = self._find_stock(selected_piece_id(self.stock_table))
        if stock is None:
            return
        dialog = PieceDialog(self, "Лист", stock.name, stock.width, stock.height, stock.quantity, stock.pattern)
        if dialog.exec_():
            self.data_manager.update_stock_piece(stock.id, **dialog.get_values())

    def on_remove_stock_clicked(self):
        piece_id = selected_piece_id(self.stock_table)
        if piece_id:
            self.data_manager.remove_stock_piece(piece_id)

    def on_add_cut_clicked(self):
        dialog = PieceDialog(self, "Новая деталь")
        if dialog.exec_():
            self.data_manager.add_cut_piece(**dialog.get_values())

    def on_edit_cut_clicked(self, *_):
        cut = self.data_manager.get_cut_piece(selected_piece_id(self.cuts_table))
        if cut is None:
            return
        dialog = PieceDialog(self, "Деталь", cut.name, cut.width, cut.height, cut.quantity, cut.pattern)
        if dialog.exec_():
            self.data_manager.update_cut_piece(cut.id, **dialog.get_values())

    def on_remove_cut_clicked(self):
        piece_id = selected_piece_id(self.cuts_table)
        if piece_id:
            self.data_manager.remove_cut_piece(piece_id)

    def on_edge_band_clicked(self):
        cut = self.data_manager.get_cut_piece(selected_piece_id(self.cuts_table))
        if cut is None:
            show_centered_message(self, "Кромка", "Выберите деталь в таблице", "warning")
            return
        dialog = EdgeBandDialog(self, cut.edge_band)
        if dialog.exec_():
            self.data_manager.update_cut_piece(cut.id, edge_band=dialog.get_edge_band())

    def on_groove_clicked(self):
        cut = self.data_manager.get_cut_piece(selected_piece_id(self.cuts_table))
        if cut is None:
            show_centered_message(self, "Паз", "Выберите деталь в таблице", "warning")
            return
        dialog = GrooveDialog(self, cut.groove)
        if dialog.exec_():
            self.data_manager.update_cut_piece(cut.id, groove=dialog.get_groove())

    def _collect_params(self):
        return {
            'kerf': self.kerf_spin.value(),
            'grid_step': self.grid_step_spin.value(),
            'allow_rotation': self.allow_rotation.isChecked(),
        }

    def on_save_defaults_clicked(self):
        self.settings.update(self._collect_params())
        if self.settings_manager.save_settings(self.settings):
            show_centered_message(self, "Настройки", "Настройки по умолчанию сохранены")
        else:
            show_centered_message(self, "Настройки", "Не удалось сохранить настройки", "critical")

    def _job_dir(self):
        return self.settings.get('last_job_dir') or os.getcwd()

    def _remember_job_dir(self, path):
        self.settings['last_job_dir'] = os.path.dirname(os.path.abspath(path))
        self.settings_manager.save_settings(self.settings)

    def open_job(self, path):
        """Загрузка задания из файла с сообщением об ошибке"""
        try:
            self.data_manager.load_job(path)
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error(f"❌ Ошибка загрузки задания {path}: {e}")
            show_centered_message(self, "Ошибка загрузки", f"Не удалось загрузить задание:\n{e}", "critical")
            return False

        params = self.data_manager.params
        self.kerf_spin.setValue(float(params['kerf']))
        self.grid_step_spin.setValue(float(params['grid_step']))
        self.allow_rotation.setChecked(bool(params['allow_rotation']))
        self._show_result(None)
        return True

    def on_open_job_clicked(self):
        path, _ = QFileDialog.getOpenFileName(self, "Открыть задание", self._job_dir(), JOB_FILE_FILTER)
        if path and self.open_job(path):
            self._remember_job_dir(path)

    def on_save_job_clicked(self):
        path, _ = QFileDialog.getSaveFileName(self, "Сохранить задание", self._job_dir(), JOB_FILE_FILTER)
        if not path:
            return
        self.data_manager.params.update(self._collect_params())
        try:
            self.data_manager.save_job(path)
            self._remember_job_dir(path)
        except OSError as e:
            logger.error(f"❌ Ошибка сохранения задания {path}: {e}")
            show_centered_message(self, "Ошибка сохранения", str(e), "critical")

    def on_clear_clicked(self):
        self.data_manager.clear_data()
        self._show_result(None)

    # ========== ОПТИМИЗАЦИЯ ==========

    def on_optimize_clicked(self):
        """Обработчик кнопки оптимизации"""
        if not self.data_manager.has_data():
            show_centered_message(self, "Нет данных", "Добавьте хотя бы один лист и одну деталь", "warning")
            return

        self.data_manager.params.update(self._collect_params())

        self.optimize_button.setEnabled(False)
        self.optimize_button.setText("Оптимизация...")

        self.progress_dialog = ProgressDialog(self)
        self.progress_dialog.show()

        self.data_manager.run_optimization_async()

    def _update_progress(self, percent):
        if self.progress_dialog:
            self.progress_dialog.set_progress(percent)

    def _finish_optimization(self):
        if self.progress_dialog:
            self.progress_dialog.close()
            self.progress_dialog = None
        self.optimize_button.setText("🚀 Запустить оптимизацию")
        self.optimize_button.setEnabled(self.data_manager.has_data())

    def _handle_optimization_result(self, result):
        """Обработка результата оптимизации"""
        self._finish_optimization()
        self._show_result(result)
        self.tabs.setCurrentIndex(1)
        logger.info(f"✅ Оптимизация завершена! Размещено: {result.cuts_placed} деталей, "
                    f"листов: {len(result.layouts)}, загрузка: {result.average_utilization:.1f}%")

    def _handle_optimization_error(self, error_msg):
        """Обработка ошибки оптимизации"""
        self._finish_optimization()
        logger.error(f"❌ Ошибка оптимизации: {error_msg}")
        show_centered_message(self, "Ошибка оптимизации", error_msg, "critical")

    def _stock_names(self):
        return {stock.id: stock.name for stock in self.data_manager.stock_pieces if stock.name}

    def _show_result(self, result):
        self._update_statistics(result)
        fill_layouts_table(self.layouts_table, result, self._stock_names())
        self.visualization.update_visualization(result, self.data_manager.cut_pieces, self._stock_names())
        self._set_export_enabled(bool(result and result.layouts))

    def _update_statistics(self, result):
        """Обновление статистики"""
        if result is None:
            for label in self.stats_labels.values():
                label.setText("-")
            return

        self.stats_labels['stock_used'].setText(str(result.total_stock_used))
        self.stats_labels['cuts_needed'].setText(str(result.total_cuts_needed))
        self.stats_labels['cuts_placed'].setText(str(result.cuts_placed))
        self.stats_labels['utilization'].setText(f"{result.average_utilization:.2f}%")
        self.stats_labels['waste'].setText(f"{result.total_waste:,.0f} мм²".replace(',', ' '))

    def _update_current_sheet_label(self, index):
        result = self.data_manager.optimization_result
        if not result or index >= len(result.layouts):
            return
        layout = result.layouts[index]
        self.stats_labels['sheet'].setText(
            f"{len(layout.positions)} дет., {layout.utilization_rate:.1f}%, отходы {layout.waste_area:,.0f} мм²".replace(',', ' ')
        )
        self.layouts_table.selectRow(index)

    # ========== ЭКСПОРТ ==========

    def _set_export_enabled(self, enabled):
        self.export_report_button.setEnabled(enabled)
        self.export_dxf_button.setEnabled(enabled)
        self.export_sheet_dxf_button.setEnabled(enabled)

    def on_export_report_clicked(self):
        result = self.data_manager.optimization_result
        if not result:
            return
        path, _ = QFileDialog.getSaveFileName(self, "Экспорт отчета", "freecut-report.txt", "Текст (*.txt)")
        if not path:
            return
        try:
            export_report_file(result, path)
        except OSError as e:
            show_centered_message(self, "Ошибка экспорта", str(e), "critical")

    def on_export_dxf_clicked(self, current_only=False):
        result = self.data_manager.optimization_result
        if not result:
            return
        path, _ = QFileDialog.getSaveFileName(self, "Экспорт DXF", "freecut-layout.dxf", "DXF (*.dxf)")
        if not path:
            return
        layout_index = self.visualization.current_sheet_index if current_only else None
        try:
            export_dxf_file(result, path, layout_index)
        except OSError as e:
            show_centered_message(self, "Ошибка экспорта", str(e), "critical")
