"""Application bootstrap utilities."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QGuiApplication
from PyQt6.QtWidgets import QApplication

from .config import (
    DEFAULT_LABELS,
    DEFAULT_MARKERS,
    DEFAULT_MODEL_PATH,
    ViewerConfig,
    parse_label_spec,
    parse_marker_spec,
    parse_positive_float,
)
from .logging import configure_logging
from .ui.main_window import MainWindow
from .ui.theme import apply_space_theme


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="earthviewer", description="Rotating 3D Earth with geographic markers.")
    parser.add_argument("--model", type=Path, default=DEFAULT_MODEL_PATH, help="GLB model of the Earth")
    parser.add_argument("--texture", type=Path, default=None, help="equirectangular image replacing the model texture")
    parser.add_argument(
        "--marker",
        action="append",
        type=_argparse_type(parse_marker_spec),
        default=[],
        metavar="LAT,LON[,R,G,B]",
        help="add a marker (repeatable)",
    )
    parser.add_argument(
        "--label",
        action="append",
        type=_argparse_type(parse_label_spec),
        default=[],
        metavar="LAT,LON,TEXT",
        help="add a text label (repeatable)",
    )
    parser.add_argument("--grid", action="store_true", help="draw the latitude/longitude grid")
    parser.add_argument(
        "--grid-step",
        type=_argparse_type(parse_positive_float),
        default=30.0,
        help="grid spacing in degrees",
    )
    parser.add_argument("--no-rotate", action="store_true", help="start with rotation paused")
    parser.add_argument("--no-alignment-markers", action="store_true", help="skip the Rio/Sydney alignment markers")
    parser.add_argument("--log-level", default="INFO", help="loguru level name")
    return parser


def _argparse_type(parse):
    def convert(value: str):
        try:
            return parse(value)
        except ValueError as exc:
            raise argparse.ArgumentTypeError(str(exc)) from exc

    convert.__name__ = parse.__name__
    return convert


def config_from_args(args: argparse.Namespace) -> ViewerConfig:
    return ViewerConfig(
        is_rotating=not args.no_rotate,
        grid_enabled=args.grid,
        grid_step_deg=args.grid_step,
        show_alignment_markers=not args.no_alignment_markers,
        model_path=args.model,
        texture_path=args.texture,
    )


def _configure_high_dpi() -> None:
    """Configure high-DPI handling before QApplication instantiation."""
    QGuiApplication.setHighDpiScaleFactorRoundingPolicy(
        Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )


def main(argv: Optional[list[str]] = None) -> int:
    """Launch the Earth viewer."""
    argv = list(sys.argv if argv is None else argv)
    args, qt_args = build_parser().parse_known_args(argv[1:])
    configure_logging(args.log_level)

    markers = args.marker or list(DEFAULT_MARKERS)
    labels = args.label or list(DEFAULT_LABELS)

    _configure_high_dpi()
    app = QApplication([argv[0], *qt_args])
    apply_space_theme(app)

    window = MainWindow(config_from_args(args), markers=markers, labels=labels)
    window.show()
    window.start()

    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
