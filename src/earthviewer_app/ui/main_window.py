"""Main application window hosting the globe."""
from __future__ import annotations

from typing import Optional, Sequence

from loguru import logger
from PyQt6.QtGui import QAction, QKeySequence
from PyQt6.QtWidgets import QLabel, QMainWindow, QMessageBox, QToolBar

from ..config import DEFAULT_LABELS, DEFAULT_MARKERS, LabelPlacement, MarkerPlacement, ViewerConfig
from ..io.model_loader import LoadedModel, load_model
from ..io.textures import load_texture_image
from ..viewer.earth_viewer import EarthViewer
from ..viewer.globe_widget import GlobeWidget
from ..workers.task_runner import FunctionTask, TaskRunner


def _load_model_with_texture(config: ViewerConfig) -> LoadedModel:
    texture = load_texture_image(config.texture_path) if config.texture_path else None
    return load_model(config.model_path, texture_override=texture)


class MainWindow(QMainWindow):
    """Window with the globe widget, a toolbar and a status bar."""

    def __init__(
        self,
        config: Optional[ViewerConfig] = None,
        markers: Sequence[MarkerPlacement] = DEFAULT_MARKERS,
        labels: Sequence[LabelPlacement] = DEFAULT_LABELS,
    ) -> None:
        super().__init__()
        self.setWindowTitle("Earth Viewer")
        self.resize(1280, 800)

        self.config = config or ViewerConfig()
        self._markers = list(markers)
        self._labels = list(labels)
        self._task_runner = TaskRunner()
        self._active_tasks: set[FunctionTask] = set()

        self.viewer = EarthViewer(self.config)
        self.globe = GlobeWidget(self)
        self.setCentralWidget(self.globe)
        self.globe.set_scene(self.viewer.create_scene())

        self._build_toolbar()
        self._connect_signals()
        self._status_label = QLabel("")
        self.statusBar().addPermanentWidget(self._status_label)
        self._update_status_label()
        logger.info("UI initialised")

    # ------------------------------------------------------------------
    def _build_toolbar(self) -> None:
        toolbar = QToolBar("View", self)
        toolbar.setMovable(False)
        self.addToolBar(toolbar)

        self.rotate_action = QAction("Rotate", self)
        self.rotate_action.setCheckable(True)
        self.rotate_action.setChecked(self.viewer.is_rotating)
        toolbar.addAction(self.rotate_action)

        self.reset_camera_action = QAction("Reset Camera", self)
        self.reset_camera_action.setShortcut(QKeySequence("Ctrl+R"))
        toolbar.addAction(self.reset_camera_action)

    def _connect_signals(self) -> None:
        self.rotate_action.toggled.connect(self._on_rotate_toggled)
        self.reset_camera_action.triggered.connect(self.globe.reset_camera)
        self.globe.rotationToggleRequested.connect(self._on_rotation_toggle_requested)

    # ------------------------------------------------------------------
    def start(self) -> None:
        """Load the Earth model in the background; setup continues once it arrives."""
        self.statusBar().showMessage(f"Loading model {self.config.model_path}...")
        task = FunctionTask(_load_model_with_texture, self.config, description="model load")
        self._active_tasks.add(task)
        task.signals.finished.connect(lambda result, t=task: self._on_model_loaded(t, result))
        task.signals.failed.connect(lambda exc, tb, t=task: self._on_model_failed(t, exc, tb))
        self._task_runner.submit(task)

    def _on_model_loaded(self, task: FunctionTask, model: LoadedModel) -> None:
        self._active_tasks.discard(task)
        self.statusBar().clearMessage()
        if self.viewer.attach_model(model) is None:
            QMessageBox.warning(self, "Model", "The model has no root node; markers and labels are disabled.")
        self.globe.run_render_loop(self.viewer.advance_frame)
        self._apply_startup_placements()
        self._update_status_label()

    def _on_model_failed(self, task: FunctionTask, exc: Exception, tb: str) -> None:
        self._active_tasks.discard(task)
        self.statusBar().clearMessage()
        logger.error("Model load failed: {}\n{}", exc, tb)
        QMessageBox.critical(self, "Model Load Failed", f"Could not load {self.config.model_path}:\n{exc}")
        self.globe.run_render_loop(self.viewer.advance_frame)
        self._update_status_label()

    def _apply_startup_placements(self) -> None:
        self.viewer.add_lat_lon_grid(self.config.grid_step_deg)
        for label in self._labels:
            self.viewer.add_coordinate_label(label.latitude, label.longitude, label.text)
        for marker in self._markers:
            self.viewer.add_geo_marker(marker.latitude, marker.longitude, marker.color)
        logger.info("Placed {} labels and {} markers", len(self._labels), len(self._markers))

    # ------------------------------------------------------------------
    def _on_rotate_toggled(self, checked: bool) -> None:
        self.viewer.set_rotating(checked)
        self._update_status_label()

    def _on_rotation_toggle_requested(self) -> None:
        self.rotate_action.setChecked(not self.rotate_action.isChecked())

    def _update_status_label(self) -> None:
        model_state = "model loaded" if self.viewer.is_ready else "no model"
        rotation_state = "rotating" if self.viewer.is_rotating else "paused"
        self._status_label.setText(f"{model_state} | {rotation_state}")

    def closeEvent(self, event) -> None:  # noqa: N802
        self.globe.stop_render_loop()
        super().closeEvent(event)
