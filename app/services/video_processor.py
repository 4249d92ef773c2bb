#!/usr/bin/env python3
"""
Video Processing Module

Thin wrapper around the ffmpeg/ffprobe executables: duration probing,
normalization to 720p H.264/AAC for browser playback, and clip extraction.
Success is exit code 0 plus an output file on disk; failures carry the
captured stderr.
"""

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union
from app.config import settings
import structlog

logger = structlog.get_logger()

PathLike = Union[str, Path]

TARGET_WIDTH = 1280
TARGET_HEIGHT = 720


class VideoProcessingError(Exception):
    pass


@dataclass
class ProcessingResult:
    success: bool
    input_path: str
    output_path: str
    error: Optional[str] = None
    duration: Optional[float] = None


class VideoProcessor:
    """Runs ffmpeg/ffprobe as subprocesses."""

    def __init__(self, ffmpeg_binary: Optional[str] = None, ffprobe_binary: Optional[str] = None):
        self.ffmpeg_binary = ffmpeg_binary or settings.ffmpeg_binary
        self.ffprobe_binary = ffprobe_binary or settings.ffprobe_binary

    def _run(self, cmd: List[str]) -> subprocess.CompletedProcess:
        logger.debug("Running command", cmd=" ".join(cmd))
        return subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True)

    def is_available(self) -> bool:
        try:
            return self._run([self.ffmpeg_binary, "-version"]).returncode == 0
        except OSError:
            return False

    def probe_duration(self, file_path: PathLike) -> float:
        """
        Get video duration in seconds.

        Raises:
            VideoProcessingError: If ffprobe fails or prints nothing usable
        """
        try:
            result = self._run([
                self.ffprobe_binary,
                "-v", "error",
                "-show_entries", "format=duration",
                "-of", "default=noprint_wrappers=1:nokey=1",
                str(file_path),
            ])
        except OSError as e:
            raise VideoProcessingError(f"Failed to get video duration: {e}")

        output = (result.stdout or "").strip()
        if result.returncode != 0 or not output:
            raise VideoProcessingError(
                f"Failed to get video duration: {(result.stderr or '').strip() or 'no output'}"
            )

        try:
            return float(output)
        except ValueError:
            raise VideoProcessingError(f"Failed to get video duration: unexpected output {output!r}")

    def normalize(self, input_path: PathLike, output_path: PathLike) -> ProcessingResult:
        """
        Re-encode to H.264/AAC, scaled and padded to 1280x720.

        Args:
            input_path: Source video
            output_path: Destination file (parent directories are created)

        Returns:
            ProcessingResult with the probed duration on success
        """
        scale_and_pad = (
            f"scale={TARGET_WIDTH}:{TARGET_HEIGHT}:force_original_aspect_ratio=decrease,"
            f"pad={TARGET_WIDTH}:{TARGET_HEIGHT}:(ow-iw)/2:(oh-ih)/2"
        )
        result = self._transcode(input_path, output_path, [
            "-vf", scale_and_pad,
            "-c:v", "libx264",
            "-preset", "fast",
            "-crf", "23",
            "-c:a", "aac",
            "-b:a", "128k",
        ], "FFmpeg processing failed")

        if not result.success:
            return result

        try:
            result.duration = self.probe_duration(output_path)
        except VideoProcessingError:
            return ProcessingResult(
                success=False,
                input_path=str(input_path),
                output_path=str(output_path),
                error="Failed to get video duration after processing"
            )

        logger.info("Normalized video", input_path=str(input_path), output_path=str(output_path), duration=result.duration)
        return result

    def extract_clip(
        self,
        input_path: PathLike,
        output_path: PathLike,
        start_seconds: float,
        duration_seconds: float
    ) -> ProcessingResult:
        """Cut duration_seconds of video starting at start_seconds."""
        result = self._transcode(input_path, output_path, [
            "-ss", str(start_seconds),
            "-t", str(duration_seconds),
            "-c:v", "libx264",
            "-c:a", "aac",
        ], "Clip extraction failed")

        if result.success:
            logger.info(
                "Extracted clip",
                input_path=str(input_path),
                output_path=str(output_path),
                start_seconds=start_seconds,
                duration_seconds=duration_seconds
            )
        return result

    def _transcode(self, input_path: PathLike, output_path: PathLike, args: List[str], failure_message: str) -> ProcessingResult:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        cmd = [self.ffmpeg_binary, "-i", str(input_path)] + args + ["-y", str(output_path)]
        try:
            completed = self._run(cmd)
        except OSError as e:
            logger.error(failure_message, error=str(e), input_path=str(input_path))
            return ProcessingResult(
                success=False,
                input_path=str(input_path),
                output_path=str(output_path),
                error=str(e)
            )

        if completed.returncode == 0 and output_path.exists():
            return ProcessingResult(success=True, input_path=str(input_path), output_path=str(output_path))

        logger.error(
            failure_message,
            returncode=completed.returncode,
            input_path=str(input_path),
            output_path=str(output_path)
        )
        return ProcessingResult(
            success=False,
            input_path=str(input_path),
            output_path=str(output_path),
            error=(completed.stderr or "").strip() or failure_message
        )
