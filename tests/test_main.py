import pytest

pytest.importorskip("PyQt6.QtWidgets")

from earthviewer_app.main import build_parser, config_from_args  # noqa: E402


def test_grid_step_flag_is_parsed():
    args = build_parser().parse_args(["--grid", "--grid-step", "15"])
    config = config_from_args(args)
    assert config.grid_enabled
    assert config.grid_step_deg == 15.0


@pytest.mark.parametrize("step", ["0", "-10", "ten"])
def test_grid_step_flag_rejects_non_positive_values(step, capsys):
    with pytest.raises(SystemExit) as excinfo:
        build_parser().parse_args(["--grid-step", step])
    assert excinfo.value.code == 2
    assert "--grid-step" in capsys.readouterr().err
