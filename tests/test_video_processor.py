import shutil
import subprocess
import pytest
from unittest.mock import patch
from app.services.video_processor import VideoProcessor, VideoProcessingError

FFMPEG = shutil.which("ffmpeg")
FFPROBE = shutil.which("ffprobe")


def completed(returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


def test_probe_duration_parses_output():
    processor = VideoProcessor(ffmpeg_binary="ffmpeg", ffprobe_binary="ffprobe")
    with patch("app.services.video_processor.subprocess.run", return_value=completed(stdout="12.480000\n")) as mock_run:
        assert processor.probe_duration("clip.mp4") == pytest.approx(12.48)

        cmd = mock_run.call_args[0][0]
        assert cmd[0] == "ffprobe"
        assert cmd[-1] == "clip.mp4"
        assert "format=duration" in cmd


@pytest.mark.parametrize("result", [
    completed(returncode=1, stderr="clip.mp4: No such file or directory"),
    completed(stdout=""),
    completed(stdout="N/A"),
])
def test_probe_duration_failures(result):
    processor = VideoProcessor()
    with patch("app.services.video_processor.subprocess.run", return_value=result):
        with pytest.raises(VideoProcessingError, match="Failed to get video duration"):
            processor.probe_duration("clip.mp4")


def test_probe_duration_missing_binary():
    processor = VideoProcessor(ffprobe_binary="/nonexistent/ffprobe")
    with patch("app.services.video_processor.subprocess.run", side_effect=FileNotFoundError("ffprobe")):
        with pytest.raises(VideoProcessingError):
            processor.probe_duration("clip.mp4")


def test_normalize_builds_command_and_probes(tmp_path):
    output = tmp_path / "out" / "normalized.mp4"

    def fake_run(cmd, **kwargs):
        if cmd[0] == "ffmpeg":
            output.write_bytes(b"video")
            return completed()
        return completed(stdout="5.0")

    processor = VideoProcessor(ffmpeg_binary="ffmpeg", ffprobe_binary="ffprobe")
    with patch("app.services.video_processor.subprocess.run", side_effect=fake_run) as mock_run:
        result = processor.normalize(tmp_path / "in.mov", output)

    assert result.success is True
    assert result.duration == 5.0
    assert result.output_path == str(output)

    ffmpeg_cmd = mock_run.call_args_list[0][0][0]
    assert ffmpeg_cmd[:3] == ["ffmpeg", "-i", str(tmp_path / "in.mov")]
    assert ffmpeg_cmd[-2:] == ["-y", str(output)]
    assert "libx264" in ffmpeg_cmd
    assert "aac" in ffmpeg_cmd
    assert any("scale=1280:720" in arg for arg in ffmpeg_cmd)


def test_normalize_failure_carries_stderr(tmp_path):
    processor = VideoProcessor()
    with patch(
        "app.services.video_processor.subprocess.run",
        return_value=completed(returncode=1, stderr="Invalid data found when processing input")
    ):
        result = processor.normalize(tmp_path / "in.mov", tmp_path / "out.mp4")

    assert result.success is False
    assert result.error == "Invalid data found when processing input"
    assert result.duration is None


def test_zero_exit_without_output_is_failure(tmp_path):
    processor = VideoProcessor()
    with patch("app.services.video_processor.subprocess.run", return_value=completed()):
        result = processor.extract_clip(tmp_path / "in.mp4", tmp_path / "clip.mp4", 1.5, 2)

    assert result.success is False


def test_extract_clip_arguments(tmp_path):
    output = tmp_path / "clip.mp4"

    def fake_run(cmd, **kwargs):
        output.write_bytes(b"clip")
        return completed()

    processor = VideoProcessor(ffmpeg_binary="ffmpeg")
    with patch("app.services.video_processor.subprocess.run", side_effect=fake_run) as mock_run:
        result = processor.extract_clip(tmp_path / "in.mp4", output, 1.5, 2)

    assert result.success is True
    cmd = mock_run.call_args[0][0]
    assert cmd[cmd.index("-ss") + 1] == "1.5"
    assert cmd[cmd.index("-t") + 1] == "2"


def test_is_available_handles_missing_binary():
    processor = VideoProcessor(ffmpeg_binary="/nonexistent/ffmpeg")
    with patch("app.services.video_processor.subprocess.run", side_effect=FileNotFoundError("ffmpeg")):
        assert processor.is_available() is False


@pytest.mark.skipif(FFMPEG is None or FFPROBE is None, reason="ffmpeg is not installed")
def test_normalize_round_trip_keeps_duration(tmp_path):
    source = tmp_path / "source.mp4"
    subprocess.run(
        [
            FFMPEG, "-f", "lavfi", "-i", "testsrc=duration=2:size=320x240:rate=25",
            "-f", "lavfi", "-i", "sine=frequency=440:duration=2",
            "-shortest", "-c:v", "libx264", "-c:a", "aac", "-y", str(source),
        ],
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        check=True
    )

    processor = VideoProcessor(ffmpeg_binary=FFMPEG, ffprobe_binary=FFPROBE)
    result = processor.normalize(source, tmp_path / "normalized" / "out.mp4")

    assert result.success is True, result.error
    assert result.duration == pytest.approx(processor.probe_duration(source), abs=0.1)
