import logging
import os
import subprocess
from time import time

from chaosgame.errors import EncodingFailure


FFMPEG = "ffmpeg"
FRAME_DIGITS = 10
FRAME_PATTERN = f"%0{FRAME_DIGITS}d.png"


def frame_filename(frame_index):
    return f"{frame_index:0{FRAME_DIGITS}d}.png"


def ffmpeg_command(frames_dir, output_path, frame_rate, output_format="gif"):
    """Build the ffmpeg command that assembles the numbered frames into a gif or mp4."""
    command = [
        FFMPEG, "-y",
        "-loglevel", "error",
        "-framerate", str(frame_rate),
        "-start_number", "1",
        "-i", os.path.join(frames_dir, FRAME_PATTERN),
    ]
    if output_format == "gif":
        # Single palette for the whole animation keeps the point colors stable
        command += ["-vf", "split[a][b];[a]palettegen[p];[b][p]paletteuse", "-loop", "0"]
    elif output_format == "mp4":
        # -crf 17: high quality, yuv420p needs even dimensions
        command += [
            "-vf", "scale=trunc(iw/2)*2:trunc(ih/2)*2",
            "-c:v", "libx264",
            "-pix_fmt", "yuv420p",
            "-crf", "17",
        ]
    else:
        raise ValueError(f"Unsupported output format {output_format!r}")
    command.append(output_path)
    return command


def encode_frames(frames_dir, output_path, frame_rate, output_format="gif"):
    """Run ffmpeg over a directory of numbered frames. Raises EncodingFailure on any encoder error."""
    if not os.path.isfile(os.path.join(frames_dir, frame_filename(1))):
        raise EncodingFailure(f"No frames to encode in {frames_dir}")

    command = ffmpeg_command(frames_dir, output_path, frame_rate, output_format)
    logging.info(f"Encoding {output_path}: {' '.join(command)}")
    start_time = time()
    try:
        result = subprocess.run(command, capture_output=True, text=True)
    except FileNotFoundError as error:
        raise EncodingFailure(f"{FFMPEG} not found. The frames were kept in {frames_dir}.") from error

    if result.returncode != 0:
        stderr = (result.stderr or "").strip()
        raise EncodingFailure(
            f"{FFMPEG} exited with code {result.returncode}: {stderr[-500:]}",
            returncode=result.returncode,
            stderr=stderr,
        )
    logging.info(f"Encoded {output_path} in {time() - start_time:.2f} seconds.")
    return output_path
