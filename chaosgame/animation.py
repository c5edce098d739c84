import logging
import math
import os
import shutil
from enum import Enum
from multiprocessing import get_context
from time import time

from chaosgame.encode import encode_frames, frame_filename
from chaosgame.errors import RenderFailure
from chaosgame.geometry import optimal_rate, vertices_of
from chaosgame.iterator import ChaosGame
from chaosgame.render import FrameRenderer
from chaosgame.settings import validate_settings


class RunState(Enum):
    SETUP = "setup"
    RUNNING = "running"
    COMPLETE = "complete"
    FAILED = "failed"


def create_dir(path):
    """Recreate a directory, removing it first if it exists."""
    if os.path.isdir(path):
        shutil.rmtree(path)
    os.makedirs(path)


def run_name(settings, rate):
    truncated_rate = math.floor(rate * 1000) / 1000
    return f"chaos_game_n{settings.vertices}_r{truncated_rate:.3f}_f{settings.total_frames}_fps{settings.frame_rate}"


_worker_renderer = None


def _init_worker(settings, vertices, rate):
    global _worker_renderer
    _worker_renderer = FrameRenderer(settings, vertices, rate)


def _render_job(job):
    frame_index, points = job
    return _worker_renderer.render(frame_index, points)


class AnimationDriver:
    """
    Runs the chaos game for the configured number of frames, one step per frame,
    and writes every rendered frame to `<output_dir>/<run name>/frames`.
    """

    def __init__(self, settings, rng=None, workers=1):
        validate_settings(settings)
        self.state = RunState.SETUP
        self.settings = settings
        self.workers = max(1, int(workers))

        self.polygon = settings.polygon_spec()
        self.vertices = vertices_of(self.polygon)
        self.rate = optimal_rate(self.polygon.vertex_count)
        self.name = run_name(settings, self.rate)
        self.output_dir = os.path.join(settings.output_dir, self.name)
        self.frames_dir = os.path.join(self.output_dir, "frames")

        self.game = ChaosGame(self.vertices, self.rate, rng=rng, seed=settings.seed)
        self.renderer = FrameRenderer(settings, self.vertices, self.rate)
        self.frame_paths = []
        logging.info(
            f"Chaos game setup: {self.polygon.vertex_count} vertices, radius {self.polygon.radius:.1f}, "
            f"rate {self.rate:.6f}, {settings.total_frames} frames at {settings.frame_rate} fps."
        )

    @property
    def total_frames(self):
        return self.settings.total_frames

    @property
    def animation_path(self):
        return os.path.join(self.output_dir, f"{self.name}.{self.settings.output_format}")

    def prepare_directories(self):
        try:
            create_dir(self.output_dir)
            create_dir(self.frames_dir)
        except OSError as error:
            raise RenderFailure(0, f"cannot create {self.frames_dir}: {error}") from error
        logging.info(f"Writing frames to {self.frames_dir}")

    def advance(self, frame_index):
        """Step the game once for `frame_index` and return the points that frame shows."""
        self.game.step()
        points = self.game.points.snapshot()
        if len(points) != frame_index + 1:
            raise RuntimeError(f"Frame {frame_index} expects {frame_index + 1} points, the sequence has {len(points)}")
        return points

    def frames(self):
        """Yield the frames in order, stepping the game once before each one."""
        for frame_index in range(1, self.total_frames + 1):
            yield self.renderer.render(frame_index, self.advance(frame_index))

    def parallel_frames(self):
        """Same frames as `frames`, rendered in a process pool one batch at a time."""
        batch_size = self.workers * 4
        context = get_context("spawn")  # the parent already runs numba threads
        with context.Pool(self.workers, initializer=_init_worker, initargs=(self.settings, self.vertices, self.rate)) as pool:
            for start in range(1, self.total_frames + 1, batch_size):
                stop = min(start + batch_size, self.total_frames + 1)
                jobs = [(frame_index, self.advance(frame_index)) for frame_index in range(start, stop)]
                yield from pool.map(_render_job, jobs)

    def write_frame(self, frame):
        path = os.path.join(self.frames_dir, frame_filename(frame.index))
        try:
            frame.image.save(path)
        except OSError as error:
            raise RenderFailure(frame.index, f"cannot write {path}: {error}") from error
        self.frame_paths.append(path)
        return path

    def run(self):
        """Render and write every frame. Frames written before a failure are left on disk."""
        if self.state is not RunState.SETUP:
            raise RuntimeError(f"Animation already {self.state.value}")

        self.state = RunState.RUNNING
        start_time = time()
        progress_every = max(1, self.total_frames // 10)
        try:
            self.prepare_directories()
            frames = self.parallel_frames() if self.workers > 1 else self.frames()
            for frame in frames:
                self.write_frame(frame)
                if frame.index % progress_every == 0 or frame.index == self.total_frames:
                    logging.info(f"Frame {frame.index}/{self.total_frames} written.")
        except Exception:
            self.state = RunState.FAILED
            logging.error(f"Run aborted after {len(self.frame_paths)} frames.")
            raise

        self.state = RunState.COMPLETE
        logging.info(f"{self.total_frames} frames rendered in {time() - start_time:.2f} seconds.")
        return self.frame_paths

    def encode(self):
        """Assemble the written frames into the animation file. Can be retried on EncodingFailure."""
        return encode_frames(
            self.frames_dir,
            self.animation_path,
            self.settings.frame_rate,
            self.settings.output_format,
        )
