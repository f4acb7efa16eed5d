"""Scene owner for the rotating Earth: setup, model attachment and geo placements."""
from __future__ import annotations

import math
from typing import Optional

from loguru import logger

from ..config import ALIGNMENT_MARKERS, ViewerConfig
from ..io.model_loader import ROOT_NODE_NAME, LoadedModel
from ..math.geo_mapping import (
    DEFAULT_CALIBRATION,
    AssetCalibration,
    grid_latitudes,
    grid_longitudes,
    lat_lon_to_position,
    latitude_circle_path,
    meridian_path,
)
from ..models.geo import CartesianPosition, Color3
from ..scene.camera import ArcRotateCamera
from ..scene.graph import (
    DirectionalLight,
    HemisphericLight,
    Mesh,
    Scene,
    StandardMaterial,
    TextLabel,
    TransformNode,
    create_lines,
    create_sphere,
)

ROTATION_NODE_NAME = "RotationNode"


class EarthViewer:
    """Holds the scene graph, the rotation node and the loaded Earth model.

    Placement methods are no-ops until :meth:`attach_model` has found the
    model root.
    """

    def __init__(
        self,
        config: Optional[ViewerConfig] = None,
        calibration: AssetCalibration = DEFAULT_CALIBRATION,
    ) -> None:
        self.config = config or ViewerConfig()
        self.calibration = calibration
        self.scene: Optional[Scene] = None
        self.camera: Optional[ArcRotateCamera] = None
        self.rotation_node: Optional[TransformNode] = None
        self.earth_model_root: Optional[TransformNode] = None
        self.is_rotating = self.config.is_rotating
        self.rotation_speed = self.config.rotation_speed

    # ------------------------------------------------------------------
    @property
    def is_ready(self) -> bool:
        return self.earth_model_root is not None

    @property
    def earth_radius_scaled(self) -> float:
        return self.config.earth_radius_scaled

    def get_position_from_lat_lon(self, latitude: float, longitude: float, radius: float) -> CartesianPosition:
        return lat_lon_to_position(latitude, longitude, radius, calibration=self.calibration)

    # ------------------------------------------------------------------
    def create_scene(self) -> Scene:
        """Build the empty scene: rotation node, orbit camera and lights."""
        scene = Scene()
        scene.clear_color = Color3(0.0, 0.0, 0.0)
        self.scene = scene
        self.earth_model_root = None

        self.rotation_node = TransformNode(ROTATION_NODE_NAME, scene)

        camera = ArcRotateCamera("Camera", -math.pi / 1.5, math.pi / 2.0, 40.0, (0.0, 0.0, 0.0))
        camera.min_z = 0.001
        scene.active_camera = camera
        self.camera = camera

        scene.add_light(HemisphericLight("Hemi", (0.0, 1.0, 0.0), intensity=0.6))
        scene.add_light(DirectionalLight("Sun", (1.0, 0.0, 1.0), intensity=0.5))

        logger.debug("Scene created with {} lights", len(scene.lights))
        return scene

    def attach_model(self, model: LoadedModel) -> Optional[TransformNode]:
        """Add a loaded model to the scene and apply the asset calibration.

        Returns the model root, or ``None`` when the model has no ``__root__``
        node, in which case the viewer stays not ready.
        """
        if self.scene is None:
            self.create_scene()
        scene = self.scene

        for node in model.nodes:
            scene.add_node(node)
        root = model.root if model.root.name == ROOT_NODE_NAME else None
        if root is None:
            logger.warning("Loaded model has no {} node; placements stay disabled", ROOT_NODE_NAME)
            return None

        root.scaling[:] = self.calibration.root_scaling(self.config.scale_factor)
        root.rotation[0] = self.calibration.root_pitch_rad
        root.rotation[2] = self.calibration.axial_tilt_rad
        root.rotation[1] = 0.0
        root.parent = self.rotation_node
        self.earth_model_root = root
        logger.info("Earth model attached ({} meshes)", len(model.meshes))

        if self.config.show_alignment_markers:
            for placement in ALIGNMENT_MARKERS:
                self.add_geo_marker(placement.latitude, placement.longitude, placement.color)
        return root

    # ------------------------------------------------------------------
    def add_geo_marker(self, latitude: float, longitude: float, color: Optional[Color3] = None) -> Optional[Mesh]:
        """Place an unlit sphere above the surface at the given coordinate."""
        if not self.is_ready:
            logger.debug("Ignoring marker at ({}, {}): model not loaded", latitude, longitude)
            return None

        final_radius = self.earth_radius_scaled + self.config.marker_altitude
        position = self.get_position_from_lat_lon(latitude, longitude, final_radius)

        marker = create_sphere(f"GeoMarker_{latitude}", self.config.marker_size, self.scene)
        material = StandardMaterial(f"mat_{latitude}")
        material.emissive_color = color or Color3.red()
        material.disable_lighting = True

        marker.material = material
        marker.set_position(position)
        marker.parent = self.rotation_node
        logger.debug("Marker {} placed at {}", marker.name, position)
        return marker

    def add_coordinate_label(self, latitude: float, longitude: float, text: str) -> Optional[Mesh]:
        """Place a small anchor sphere carrying a text label."""
        if not self.is_ready:
            logger.debug("Ignoring label {!r}: model not loaded", text)
            return None

        radius = self.config.visual_radius * self.config.label_radius_factor
        position = self.get_position_from_lat_lon(latitude, longitude, radius)

        anchor = create_sphere(f"coordLabel_{text}", self.config.label_anchor_size, self.scene)
        anchor.set_position(position)
        anchor.parent = self.rotation_node
        anchor.label = TextLabel(text=text, color=Color3.white(), font_size=50, texture_size=256)
        return anchor

    def add_lat_lon_grid(self, step_deg: float = 30.0) -> list[Mesh]:
        """Draw parallels and meridians every ``step_deg`` degrees.

        Inert unless ``config.grid_enabled`` is set.
        """
        if not self.is_ready:
            logger.debug("Ignoring grid request: model not loaded")
            return []
        if not self.config.grid_enabled:
            return []
        if step_deg <= 0.0:
            logger.warning("Ignoring grid request: step must be positive, got {}", step_deg)
            return []

        radius = self.config.grid_base_radius * self.config.grid_radius_factor
        color = self.config.grid_color
        lines: list[Mesh] = []

        for lat in grid_latitudes(step_deg):
            path = latitude_circle_path(lat, radius, calibration=self.calibration)
            line = create_lines(f"lat_{lat:g}", path, self.scene, color)
            line.parent = self.rotation_node
            lines.append(line)

        for lon in grid_longitudes(step_deg):
            path = meridian_path(lon, radius, calibration=self.calibration)
            line = create_lines(f"lon_{lon:g}", path, self.scene, color)
            line.parent = self.rotation_node
            lines.append(line)

        logger.info("Grid drawn with {} lines at radius {:.3f}", len(lines), radius)
        return lines

    # ------------------------------------------------------------------
    def advance_frame(self) -> None:
        """Per-frame update: spin the rotation node when rotation is on."""
        if self.rotation_node is not None and self.is_rotating:
            self.rotation_node.rotation[1] += self.rotation_speed

    def set_rotating(self, enabled: bool) -> None:
        self.is_rotating = bool(enabled)
        logger.debug("Rotation {}", "enabled" if self.is_rotating else "paused")

    def toggle_rotation(self) -> bool:
        self.set_rotating(not self.is_rotating)
        return self.is_rotating
