"""OpenGL-powered globe viewer widget."""
from __future__ import annotations

from typing import Callable, Optional

import numpy as np
from loguru import logger
from OpenGL.GL import (
    GL_AMBIENT,
    GL_COLOR_ARRAY,
    GL_COLOR_BUFFER_BIT,
    GL_COLOR_MATERIAL,
    GL_DEPTH_BUFFER_BIT,
    GL_DEPTH_TEST,
    GL_DIFFUSE,
    GL_FLOAT,
    GL_LESS,
    GL_LIGHT0,
    GL_LIGHT1,
    GL_LIGHTING,
    GL_LINE_STRIP,
    GL_LINEAR,
    GL_MODELVIEW,
    GL_NORMAL_ARRAY,
    GL_NORMALIZE,
    GL_POSITION,
    GL_PROJECTION,
    GL_RGB,
    GL_TEXTURE_2D,
    GL_TEXTURE_COORD_ARRAY,
    GL_TEXTURE_MAG_FILTER,
    GL_TEXTURE_MIN_FILTER,
    GL_TRIANGLES,
    GL_TRUE,
    GL_UNPACK_ALIGNMENT,
    GL_UNSIGNED_BYTE,
    GL_UNSIGNED_INT,
    GL_VERTEX_ARRAY,
    glBindTexture,
    glClear,
    glClearColor,
    glColor3f,
    glColorPointer,
    glDeleteTextures,
    glDepthFunc,
    glDepthMask,
    glDisable,
    glDisableClientState,
    glDrawArrays,
    glDrawElements,
    glEnable,
    glEnableClientState,
    glGenTextures,
    glLightfv,
    glLoadMatrixf,
    glMatrixMode,
    glMultMatrixf,
    glNormalPointer,
    glPixelStorei,
    glPopMatrix,
    glPushMatrix,
    glTexCoordPointer,
    glTexImage2D,
    glTexParameteri,
    glVertexPointer,
    glViewport,
)
from PyQt6.QtCore import QPointF, Qt, QTimer, pyqtSignal
from PyQt6.QtGui import QColor, QFont, QKeyEvent, QMouseEvent, QPainter, QWheelEvent
from PyQt6.QtOpenGLWidgets import QOpenGLWidget

from ..math import transforms
from ..scene.graph import PRIMITIVE_LINE_STRIP, DirectionalLight, HemisphericLight, Mesh, Scene

FRAME_INTERVAL_MS = 16
LABEL_FONT_SCALE = 0.32  # label font_size is given for a 256px label texture


def restore_depth_state() -> None:
    """Re-enable depth testing and writes; QPainter turns them off when it paints the overlay."""
    glEnable(GL_DEPTH_TEST)
    glDepthMask(GL_TRUE)
    glDepthFunc(GL_LESS)


class GlobeWidget(QOpenGLWidget):
    """Renders a :class:`Scene` and drives the per-frame callback."""

    rotationToggleRequested = pyqtSignal()

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setMouseTracking(True)

        self._scene: Optional[Scene] = None
        self._textures: dict[int, int] = {}
        self._frame_callback: Optional[Callable[[], None]] = None
        self._timer = QTimer(self)
        self._timer.setInterval(FRAME_INTERVAL_MS)
        self._timer.timeout.connect(self._on_frame)

        self._last_pos = QPointF()
        self._dragging = False
        self._view_projection = transforms.identity()
        self._instruction_text = "Drag to orbit. Scroll to zoom. Space toggles rotation. R resets the camera."
        self._instructions_visible = True

    # ------------------------------------------------------------------
    def set_scene(self, scene: Optional[Scene]) -> None:
        self._scene = scene
        self.update()

    def scene(self) -> Optional[Scene]:
        return self._scene

    def run_render_loop(self, callback: Optional[Callable[[], None]] = None) -> None:
        """Call ``callback`` once per frame, followed by a repaint."""
        self._frame_callback = callback
        if not self._timer.isActive():
            self._timer.start()
        logger.debug("Render loop started at {} ms per frame", FRAME_INTERVAL_MS)

    def stop_render_loop(self) -> None:
        self._timer.stop()

    def reset_camera(self) -> None:
        camera = self._active_camera()
        if camera is not None:
            camera.reset()
            self.update()

    def _on_frame(self) -> None:
        if self._frame_callback is not None:
            self._frame_callback()
        self.update()

    def _active_camera(self):
        return None if self._scene is None else self._scene.active_camera

    # ------------------------------------------------------------------
    def initializeGL(self) -> None:  # noqa: N802
        glClearColor(0.0, 0.0, 0.0, 1.0)
        restore_depth_state()
        glEnable(GL_NORMALIZE)
        glPixelStorei(GL_UNPACK_ALIGNMENT, 1)

    def resizeGL(self, width: int, height: int) -> None:  # noqa: N802
        glViewport(0, 0, width, height)

    def paintGL(self) -> None:  # noqa: N802
        restore_depth_state()
        scene = self._scene
        if scene is not None:
            c = scene.clear_color
            glClearColor(c.r, c.g, c.b, 1.0)
        glClear(GL_COLOR_BUFFER_BIT | GL_DEPTH_BUFFER_BIT)

        camera = self._active_camera()
        if scene is None or camera is None:
            return

        view, projection = camera.matrices(float(self.width()), float(self.height()))
        self._view_projection = projection @ view

        glMatrixMode(GL_PROJECTION)
        glLoadMatrixf(transforms.gl_matrix(projection))
        glMatrixMode(GL_MODELVIEW)
        glLoadMatrixf(transforms.gl_matrix(view))
        self._apply_lights(scene)

        for node, world in scene.walk():
            if not isinstance(node, Mesh) or not node.visible:
                continue
            glPushMatrix()
            glMultMatrixf(transforms.gl_matrix(world))
            self._draw_mesh(node)
            glPopMatrix()

    def paintEvent(self, event):  # noqa: N802
        super().paintEvent(event)
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        if self._instructions_visible and self._instruction_text:
            painter.setPen(QColor(220, 220, 220))
            painter.drawText(16, 28, self._instruction_text)

        self._draw_labels(painter)
        painter.end()

    # ------------------------------------------------------------------
    def mousePressEvent(self, event: QMouseEvent) -> None:  # noqa: N802
        if event.button() == Qt.MouseButton.LeftButton:
            self._last_pos = event.position()
            self._dragging = True
            self._hide_instructions()
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QMouseEvent) -> None:  # noqa: N802
        pos = event.position()
        camera = self._active_camera()
        if self._dragging and camera is not None and event.buttons() & Qt.MouseButton.LeftButton:
            delta = pos - self._last_pos
            camera.orbit(float(delta.x()), float(delta.y()))
            self.update()
        self._last_pos = pos
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:  # noqa: N802
        if event.button() == Qt.MouseButton.LeftButton:
            self._dragging = False
        super().mouseReleaseEvent(event)

    def wheelEvent(self, event: QWheelEvent) -> None:  # noqa: N802
        steps = (event.angleDelta().y() / 8.0) / 15.0
        camera = self._active_camera()
        if steps != 0 and camera is not None:
            self._hide_instructions()
            camera.zoom(steps)
            self.update()
        event.accept()

    def keyPressEvent(self, event: QKeyEvent) -> None:  # noqa: N802
        key = event.key()
        if key in (Qt.Key.Key_R, Qt.Key.Key_Home):
            self.reset_camera()
            event.accept()
        elif key == Qt.Key.Key_Space:
            self.rotationToggleRequested.emit()
            event.accept()
        else:
            super().keyPressEvent(event)

    # ------------------------------------------------------------------
    def _apply_lights(self, scene: Scene) -> None:
        glDisable(GL_LIGHT0)
        glDisable(GL_LIGHT1)
        ambient = 0.0
        slots = [GL_LIGHT0, GL_LIGHT1]
        for light in scene.lights:
            if not slots:
                break
            slot = slots.pop(0)
            if isinstance(light, HemisphericLight):
                # Sky half as diffuse from the given direction, ground half as ambient.
                position = (*light.direction, 0.0)
                diffuse = light.intensity * 0.5
                ambient += light.intensity * 0.5
            elif isinstance(light, DirectionalLight):
                # GL positions point towards the light; scene directions point away from it.
                position = (-light.direction[0], -light.direction[1], -light.direction[2], 0.0)
                diffuse = light.intensity
            else:
                continue
            glLightfv(slot, GL_POSITION, position)
            glLightfv(slot, GL_DIFFUSE, (diffuse, diffuse, diffuse, 1.0))
            glLightfv(slot, GL_AMBIENT, (ambient, ambient, ambient, 1.0))
            glEnable(slot)

    def _draw_mesh(self, mesh: Mesh) -> None:
        material = mesh.material
        unlit = mesh.primitive == PRIMITIVE_LINE_STRIP or (material is not None and material.disable_lighting)

        if unlit:
            glDisable(GL_LIGHTING)
            if mesh.primitive == PRIMITIVE_LINE_STRIP:
                glColor3f(*mesh.line_color.as_tuple())
            elif material is not None:
                glColor3f(*material.emissive_color.as_tuple())
        else:
            glEnable(GL_LIGHTING)
            glEnable(GL_COLOR_MATERIAL)
            color = material.diffuse_color if material is not None else None
            glColor3f(*(color.as_tuple() if color is not None else (1.0, 1.0, 1.0)))

        texture_id = None
        if mesh.texture is not None and mesh.uvs is not None:
            texture_id = self._texture_for(mesh)

        glEnableClientState(GL_VERTEX_ARRAY)
        glVertexPointer(3, GL_FLOAT, 0, mesh.vertices)
        if mesh.normals is not None and not unlit:
            glEnableClientState(GL_NORMAL_ARRAY)
            glNormalPointer(GL_FLOAT, 0, mesh.normals)
        if mesh.colors is not None:
            glEnableClientState(GL_COLOR_ARRAY)
            glColorPointer(4, GL_FLOAT, 0, mesh.colors)
        if texture_id is not None:
            glEnable(GL_TEXTURE_2D)
            glBindTexture(GL_TEXTURE_2D, texture_id)
            glEnableClientState(GL_TEXTURE_COORD_ARRAY)
            glTexCoordPointer(2, GL_FLOAT, 0, mesh.uvs)

        if mesh.primitive == PRIMITIVE_LINE_STRIP:
            glDrawArrays(GL_LINE_STRIP, 0, mesh.vertex_count)
        elif mesh.indices is not None:
            glDrawElements(GL_TRIANGLES, int(mesh.indices.size), GL_UNSIGNED_INT, mesh.indices)
        else:
            glDrawArrays(GL_TRIANGLES, 0, mesh.vertex_count)

        if texture_id is not None:
            glDisableClientState(GL_TEXTURE_COORD_ARRAY)
            glBindTexture(GL_TEXTURE_2D, 0)
            glDisable(GL_TEXTURE_2D)
        glDisableClientState(GL_COLOR_ARRAY)
        glDisableClientState(GL_NORMAL_ARRAY)
        glDisableClientState(GL_VERTEX_ARRAY)
        glDisable(GL_COLOR_MATERIAL)
        glDisable(GL_LIGHTING)

    def _texture_for(self, mesh: Mesh) -> int:
        key = id(mesh.texture)
        texture_id = self._textures.get(key)
        if texture_id is not None:
            return texture_id

        image = mesh.texture
        height, width, _ = image.shape
        texture_id = int(glGenTextures(1))
        glBindTexture(GL_TEXTURE_2D, texture_id)
        glTexParameteri(GL_TEXTURE_2D, GL_TEXTURE_MIN_FILTER, GL_LINEAR)
        glTexParameteri(GL_TEXTURE_2D, GL_TEXTURE_MAG_FILTER, GL_LINEAR)
        glTexImage2D(GL_TEXTURE_2D, 0, GL_RGB, width, height, 0, GL_RGB, GL_UNSIGNED_BYTE, image)
        glBindTexture(GL_TEXTURE_2D, 0)
        self._textures[key] = texture_id
        logger.debug("Uploaded {}x{} texture for {}", width, height, mesh.name)
        return texture_id

    def _delete_textures(self) -> None:
        if self._textures:
            self.makeCurrent()
            glDeleteTextures(list(self._textures.values()))
            self._textures.clear()
            self.doneCurrent()

    def closeEvent(self, event) -> None:  # noqa: N802
        self._timer.stop()
        self._delete_textures()
        super().closeEvent(event)

    # ------------------------------------------------------------------
    def _draw_labels(self, painter: QPainter) -> None:
        scene = self._scene
        camera = self._active_camera()
        if scene is None or camera is None:
            return

        camera_position = camera.position
        width = float(self.width())
        height = float(self.height())
        for node, world in scene.walk():
            if not isinstance(node, Mesh) or node.label is None or not node.visible:
                continue
            anchor = transforms.transform_point(world, (0.0, 0.0, 0.0))
            if _faces_away(anchor, camera.target, camera_position):
                continue
            point = transforms.project_to_screen(self._view_projection, anchor, width, height)
            if point is None:
                continue

            label = node.label
            font = QFont(painter.font())
            font.setPixelSize(max(8, int(label.font_size * LABEL_FONT_SCALE)))
            painter.setFont(font)
            painter.setPen(QColor.fromRgbF(*label.color.as_tuple()))
            metrics = painter.fontMetrics()
            text_width = metrics.horizontalAdvance(label.text)
            painter.drawText(int(point[0] - text_width / 2.0), int(point[1] - 6), label.text)

    def _hide_instructions(self) -> None:
        if self._instructions_visible:
            self._instructions_visible = False
            self.update()


def _faces_away(anchor: np.ndarray, center: np.ndarray, camera_position: np.ndarray) -> bool:
    """True when ``anchor`` lies on the hemisphere turned away from the camera."""
    outward = anchor - center
    to_camera = camera_position - anchor
    return float(np.dot(outward, to_camera)) < 0.0
