# services/ffmpeg_service.py
import os, json, logging, subprocess, threading
from typing import List, Optional, Protocol, Tuple

from faststart_api.errors import ProcessFailure

logger = logging.getLogger(__name__)

FFMPEG  = os.getenv("FFMPEG_BIN", "ffmpeg")
FFPROBE = os.getenv("FFPROBE_BIN", "ffprobe")

# Aspect ratio buckets (integer-truncated, so 16//9 == 1 and 9//16 == 0)
LANDSCAPE_RATIO = 16 // 9
PORTRAIT_RATIO  = 9 // 16

LANDSCAPE = "landscape"
PORTRAIT  = "portrait"
OTHER     = "other"

PROCESSED_SUFFIX = ".processed"


# -------- classification --------
def classify_aspect_ratio(width: int, height: int) -> str:
    """Bucket a (width, height) pair into landscape / portrait / other."""
    if height <= 0:
        return OTHER
    ratio = int(width) // int(height)
    if ratio == LANDSCAPE_RATIO:
        return LANDSCAPE
    if ratio == PORTRAIT_RATIO:
        return PORTRAIT
    return OTHER


# -------- command builders --------
def _probe_cmd(path: str) -> List[str]:
    return [FFPROBE, "-v", "error",
            "-select_streams", "v:0",
            "-show_entries", "stream=width,height",
            "-of", "json",
            path]

def _faststart_cmd(in_path: str, out_path: str) -> List[str]:
    return [FFMPEG, "-i", in_path,
            "-movflags", "faststart",
            "-map_metadata", "0",
            "-codec", "copy",
            "-f", "mp4",
            out_path]

def processed_path_for(in_path: str) -> str:
    return f"{in_path}{PROCESSED_SUFFIX}"


def _parse_dimensions(stdout: str) -> Tuple[int, int]:
    try:
        data = json.loads(stdout)
        stream = data["streams"][0]
        return int(stream["width"]), int(stream["height"])
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise ProcessFailure(f"Could not read video dimensions: {e}")


class MediaTool(Protocol):
    """probe returns (width, height); remux writes processed_path_for(path) and returns it."""

    def probe(self, path: str) -> Tuple[int, int]: ...
    def remux(self, path: str) -> str: ...


class FFmpegMediaTool:
    """
    Runs ffprobe/ffmpeg as child processes.
    - max_concurrency bounds how many processes run at once (0/None = unbounded)
    - timeout is per process in seconds (None = wait forever)
    """

    def __init__(self, *, timeout: Optional[float] = None, max_concurrency: Optional[int] = None):
        self.timeout = timeout
        self._slots = threading.BoundedSemaphore(max_concurrency) if max_concurrency else None

    def _run(self, cmd: List[str]) -> subprocess.CompletedProcess:
        if self._slots is not None:
            self._slots.acquire()
        try:
            logger.debug("running %s", " ".join(cmd))
            return subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout)
        except FileNotFoundError:
            raise ProcessFailure(f"{cmd[0]} not found")
        except subprocess.TimeoutExpired:
            raise ProcessFailure(f"{os.path.basename(cmd[0])} timed out after {self.timeout}s")
        finally:
            if self._slots is not None:
                self._slots.release()

    def probe(self, path: str) -> Tuple[int, int]:
        """Width and height of the first video stream."""
        proc = self._run(_probe_cmd(path))
        if proc.returncode != 0:
            logger.error("ffprobe exited with %s for %s", proc.returncode, path)
            raise ProcessFailure("Error probing video")
        # strict: ffprobe runs with -v error, so anything on stderr is a failure
        if proc.stderr:
            logger.error("ffprobe stderr for %s: %s", path, proc.stderr.strip())
            raise ProcessFailure("Error in reading stream")
        return _parse_dimensions(proc.stdout)

    def remux(self, path: str) -> str:
        """Rewrite the container with the moov atom up front. Returns the new path."""
        out_path = processed_path_for(path)
        proc = self._run(_faststart_cmd(path, out_path))
        if proc.returncode != 0:
            logger.error("ffmpeg exited with %s for %s", proc.returncode, path)
            raise ProcessFailure(f"Error in encoding video: {proc.stderr}")
        return out_path


def get_video_aspect_ratio(media: MediaTool, path: str) -> str:
    width, height = media.probe(path)
    return classify_aspect_ratio(width, height)

def process_video_for_fast_start(media: MediaTool, path: str) -> str:
    return media.remux(path)
