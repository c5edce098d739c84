from dataclasses import replace

import pytest
from hypothesis import HealthCheck, settings

from chaosgame.settings import default_settings

settings.register_profile(
    "default",
    suppress_health_check=[HealthCheck.function_scoped_fixture],
    deadline=None,  # the first call of the numba kernel compiles it
)
settings.load_profile("default")


@pytest.fixture
def small_settings(tmp_path):
    """A small, fast animation writing into a temporary directory."""
    return replace(
        default_settings,
        width=120,
        height=200,
        duration=1.0,
        frame_rate=5,
        point_radius=1.0,
        highlight_radius=3.0,
        line_width=1,
        output_dir=str(tmp_path / "output"),
    )
