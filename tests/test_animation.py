import os
from dataclasses import replace

import numpy as np
import pytest
from PIL import Image

from chaosgame import animation
from chaosgame.animation import AnimationDriver, RunState, create_dir, run_name
from chaosgame.encode import frame_filename
from chaosgame.errors import EncodingFailure, InvalidConfiguration, RenderFailure
from chaosgame.geometry import optimal_rate


def test_hexagon_two_seconds_at_ten_fps(small_settings):
    settings = replace(small_settings, vertices=6, duration=2, frame_rate=10)
    driver = AnimationDriver(settings)

    paths = driver.run()

    assert driver.state is RunState.COMPLETE
    assert driver.total_frames == 20
    assert sorted(os.listdir(driver.frames_dir)) == [frame_filename(i) for i in range(1, 21)]
    assert paths == [os.path.join(driver.frames_dir, frame_filename(i)) for i in range(1, 21)]
    assert len(driver.game.points) == 21
    with Image.open(paths[-1]) as image:
        assert image.size == (settings.width, settings.height)


def test_frames_follow_the_point_sequence(small_settings):
    settings = replace(small_settings, vertices=3, duration=25, frame_rate=1, seed=42)
    driver = AnimationDriver(settings)

    frames = list(driver.frames())

    assert [frame.index for frame in frames] == list(range(1, 26))
    assert len(driver.game.points) == 26
    for frame in frames:
        assert frame.highlight == driver.game.points[frame.index]
    assert frames[-1].highlight == driver.game.points[-1]


def test_same_seed_same_frames(small_settings):
    first = list(AnimationDriver(small_settings).frames())
    second = list(AnimationDriver(small_settings).frames())
    assert [f.image.tobytes() for f in first] == [f.image.tobytes() for f in second]


def test_injected_generator(small_settings):
    driver = AnimationDriver(small_settings, rng=np.random.default_rng(5))
    reference = AnimationDriver(replace(small_settings, seed=5))
    assert [f.highlight for f in driver.frames()] == [f.highlight for f in reference.frames()]


def test_parallel_rendering_matches_sequential(small_settings, tmp_path):
    sequential = AnimationDriver(small_settings)
    sequential.run()
    parallel = AnimationDriver(replace(small_settings, output_dir=str(tmp_path / "parallel")), workers=2)
    parallel.run()

    assert [os.path.basename(p) for p in parallel.frame_paths] == [os.path.basename(p) for p in sequential.frame_paths]
    for left, right in zip(sequential.frame_paths, parallel.frame_paths):
        with Image.open(left) as a, Image.open(right) as b:
            assert a.tobytes() == b.tobytes()


def test_run_name_truncates_the_rate(small_settings):
    settings = replace(small_settings, vertices=5, duration=2, frame_rate=30)
    rate = optimal_rate(5)  # 0.6180...
    assert run_name(settings, rate) == "chaos_game_n5_r0.618_f60_fps30"


def test_output_layout(small_settings):
    driver = AnimationDriver(small_settings)
    assert driver.output_dir == os.path.join(small_settings.output_dir, driver.name)
    assert driver.frames_dir == os.path.join(driver.output_dir, "frames")
    assert driver.animation_path.endswith(f"{driver.name}.gif")


def test_create_dir_recreates(tmp_path):
    path = tmp_path / "frames"
    path.mkdir()
    (path / "stale.png").write_bytes(b"")
    create_dir(str(path))
    assert os.listdir(path) == []


def test_invalid_configuration_fails_before_any_frame(small_settings):
    with pytest.raises(InvalidConfiguration):
        AnimationDriver(replace(small_settings, vertices=2))
    assert not os.path.exists(small_settings.output_dir)


def test_render_failure_keeps_written_frames(small_settings, monkeypatch):
    driver = AnimationDriver(small_settings)
    render = driver.renderer.render

    def failing_render(frame_index, points):
        if frame_index == 3:
            raise RenderFailure(frame_index, "out of memory")
        return render(frame_index, points)

    monkeypatch.setattr(driver.renderer, "render", failing_render)
    with pytest.raises(RenderFailure):
        driver.run()

    assert driver.state is RunState.FAILED
    assert sorted(os.listdir(driver.frames_dir)) == [frame_filename(1), frame_filename(2)]


def test_unusable_output_directory_is_a_render_failure(small_settings, tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("")
    driver = AnimationDriver(replace(small_settings, output_dir=str(blocker)))

    with pytest.raises(RenderFailure) as info:
        driver.run()

    assert info.value.frame_index == 0
    assert driver.state is RunState.FAILED
    assert driver.frame_paths == []


def test_run_only_once(small_settings):
    driver = AnimationDriver(small_settings)
    driver.run()
    with pytest.raises(RuntimeError):
        driver.run()


def test_encode_uses_frames_dir(small_settings, monkeypatch):
    driver = AnimationDriver(small_settings)
    calls = []

    def fake_encode(frames_dir, output_path, frame_rate, output_format):
        calls.append((frames_dir, output_path, frame_rate, output_format))
        raise EncodingFailure("ffmpeg exited with code 1", returncode=1)

    monkeypatch.setattr(animation, "encode_frames", fake_encode)
    with pytest.raises(EncodingFailure):
        driver.encode()
    assert calls == [(driver.frames_dir, driver.animation_path, small_settings.frame_rate, "gif")]
