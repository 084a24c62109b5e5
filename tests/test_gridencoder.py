#!/usr/bin/env python3

"""
Pytest coverage for frame grid encoding.
"""

# Standard Library
import os
import shutil
import subprocess
import sys

# PIP3 modules
import numpy
import pytest
import PIL.Image

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

# local repo modules
from votwlib import gridencoder
from votwlib import medialib
from votwlib.core import confirm
from votwlib.core import utils
from votwlib.core.errors import EncoderError
from votwlib.core.errors import ValidationError
from votwlib.core.project import VotwProject
from votwlib.media import ffmpeg
from votwlib.media import ffmpeg_extract

#============================================

REQUIRED_TOOLS = ("ffmpeg", "ffprobe")
MISSING_TOOLS = [tool for tool in REQUIRED_TOOLS if shutil.which(tool) is None]
HAVE_TOOLS = len(MISSING_TOOLS) == 0
SKIP_TOOLS_REASON = f"missing tools: {', '.join(MISSING_TOOLS)}"

#============================================

@pytest.fixture(autouse=True)
def quiet_output():
	utils.set_quiet_mode(True)
	yield
	utils.set_quiet_mode(False)

#============================================

def _write_frames(frame_dir: str, count: int, size: int = 2) -> list:
	"""
	Write count solid PNG frames, frame i has red channel i % 256.
	"""
	os.makedirs(frame_dir, exist_ok=True)
	paths = []
	for index in range(count):
		path = os.path.join(frame_dir, f"frame{index + 1:05d}.png")
		image = PIL.Image.new("RGBA", (size, size), color=(index % 256, 7, 9, 255))
		image.save(path)
		paths.append(path)
	return paths

#============================================

@pytest.mark.parametrize("frames,expected", [
	(1, (1, 0.1)),
	(30, (1, 3.0)),
	(256, (1, 25.6)),
	(257, (2, 0.1)),
	(1280, (5, 25.6)),
	(6144, (24, 25.6)),
])
def test_grid_layout(frames, expected) -> None:
	(grid_amount, last_stop_time) = gridencoder.grid_layout(frames)
	assert grid_amount == expected[0]
	assert last_stop_time == pytest.approx(expected[1])

#============================================

def test_grid_layout_rejects_empty() -> None:
	with pytest.raises(EncoderError):
		gridencoder.grid_layout(0)

#============================================

def test_tile_position() -> None:
	assert gridencoder.tile_position(0, 64) == (0, 0)
	assert gridencoder.tile_position(17, 64) == (64, 64)
	assert gridencoder.tile_position(255, 8) == (120, 120)
	# the next grid starts over at the top left
	assert gridencoder.tile_position(256, 8) == (0, 0)

#============================================

def test_frame_filter() -> None:
	assert ffmpeg.frameFilter(256) == "scale=256:256"
	padded = ffmpeg.frameFilter(512, keep_aspect_ratio=True)
	assert padded.startswith("pad=")
	assert padded.endswith("scale=512:512")

#============================================

def test_extract_frames_command(tmp_path, monkeypatch) -> None:
	"""
	Ensure frame extraction asks ffmpeg for the rate and square size.
	"""
	commands = []
	frame_dir = str(tmp_path / "frames")

	def fake_run(cmd, msg=False):
		commands.append(cmd)
		_write_frames(frame_dir, 3)
		return 0

	monkeypatch.setattr(ffmpeg_extract, "runCmd", fake_run)
	frames = ffmpeg.extractFrames("in.mp4", frame_dir, 20, 128)
	assert len(frames) == 3
	assert frames == sorted(frames)
	assert "fps=20,scale=128:128" in commands[0]
	assert "-an" in commands[0]

#============================================

def test_extract_frames_failure(tmp_path, monkeypatch) -> None:
	monkeypatch.setattr(ffmpeg_extract, "runCmd", lambda cmd, msg=False: 1)
	with pytest.raises(EncoderError):
		ffmpeg.extractFrames("in.mp4", str(tmp_path), 10, 64)

#============================================

def test_limit_frames() -> None:
	encoder = gridencoder.VideoGridEncoder()
	frames = [f"f{index}" for index in range(6145)]
	with pytest.raises(ValidationError):
		encoder._limit_frames(frames, "long.mp4", 10, confirm.always_no)
	kept = encoder._limit_frames(frames, "long.mp4", 10, confirm.always_yes)
	assert len(kept) == 6144
	assert kept[-1] == "f6143"
	short = frames[:100]
	assert encoder._limit_frames(short, "short.mp4", 10, confirm.refuse) == short

#============================================

def test_atlas_tiles(tmp_path, monkeypatch) -> None:
	"""
	Ensure frames land row by row and a new atlas starts every 256 frames.
	"""
	frames = _write_frames(str(tmp_path / "frames"), 258)
	saved = []

	def fake_save(atlas, out_dir, video_token, grid_index):
		saved.append((grid_index, atlas.copy()))
		return ""

	encoder = gridencoder.VideoGridEncoder(str(tmp_path / "output"))
	monkeypatch.setattr(encoder, "_save_atlas", fake_save)
	encoder._write_atlases(frames, "XXXXXXCats", "XXXXXClip1", 2)
	assert [index for (index, _atlas) in saved] == [1, 2]
	first = saved[0][1]
	assert first.shape == (32, 32, 4)
	assert first.dtype == numpy.uint8
	assert tuple(first[0, 0]) == (0, 7, 9, 255)
	# frame 17 sits in row 1, column 1
	assert tuple(first[2, 2]) == (17, 7, 9, 255)
	assert tuple(first[31, 31]) == (255, 7, 9, 255)
	second = saved[1][1]
	assert tuple(second[0, 0]) == (0, 7, 9, 255)
	assert tuple(second[0, 2]) == (1, 7, 9, 255)
	assert tuple(second[2, 0]) == (0, 0, 0, 0)

#============================================

def test_atlas_written_as_dds(tmp_path) -> None:
	"""
	Ensure atlases are block compressed, DXT1 unless high quality is asked.
	"""
	frames = _write_frames(str(tmp_path / "frames"), 3)
	for (high_quality, fourcc) in ((False, b"DXT1"), (True, b"DXT5")):
		output_dir = str(tmp_path / f"output_{fourcc.decode()}")
		encoder = gridencoder.VideoGridEncoder(output_dir, high_quality=high_quality)
		encoder._write_atlases(frames, "XXXXXXCats", "XXXXXClip1", 2)
		path = os.path.join(encoder.texture_dir("XXXXXXCats"), "XXXXXClip1_01.dds")
		with open(path, 'rb') as handle:
			header = handle.read(128)
		assert header[:4] == b"DDS "
		# pixel format fourcc inside the 124 byte header
		assert header[84:88] == fourcc
		with PIL.Image.open(path) as image:
			assert image.size == (32, 32)

#============================================

def test_encode_without_audio(tmp_path, monkeypatch) -> None:
	"""
	Ensure a silent video gets a silence track as long as its frames play.
	"""
	video_path = str(tmp_path / "Clip1.mp4")
	with open(video_path, 'wb') as handle:
		handle.write(b"")
	silence_calls = []

	def fake_extract(movfile, frame_dir, framerate, size, keep_aspect_ratio, imgcode):
		return _write_frames(frame_dir, 300)

	def fake_silence(wavfile, seconds, samplerate=44100, bitrate=16):
		silence_calls.append((wavfile, seconds))
		return wavfile

	monkeypatch.setattr(ffmpeg, "extractFrames", fake_extract)
	monkeypatch.setattr(ffmpeg, "makeSilence", fake_silence)
	monkeypatch.setattr(medialib, "hasAudio", lambda path: False)
	encoder = gridencoder.VideoGridEncoder(str(tmp_path / "output"))
	monkeypatch.setattr(encoder, "_save_atlas",
		lambda atlas, out_dir, token, index: "")
	result = encoder.encode(video_path, "XXXXXXCats", "XXXXXClip1", 2,
		False, confirm.refuse, 20)
	(grid_amount, last_stop_time, audio_name) = result
	assert grid_amount == 2
	assert last_stop_time == pytest.approx(4.4)
	assert audio_name == "XXXXXClip1SND"
	(wavfile, seconds) = silence_calls[0]
	assert wavfile.endswith(os.path.join("sound", "Videos", "XXXXXXCats",
		"XXXXXClip1.wav"))
	assert seconds == pytest.approx(15.0)

#============================================

def test_encode_missing_video(tmp_path) -> None:
	encoder = gridencoder.VideoGridEncoder(str(tmp_path / "output"))
	with pytest.raises(EncoderError):
		encoder.encode(str(tmp_path / "nope.mp4"), "XXXXXXCats", "XXXXXClip1",
			64, False, confirm.refuse, 10)

#============================================

@pytest.mark.skipif(not HAVE_TOOLS, reason=SKIP_TOOLS_REASON)
def test_encode_real_video(tmp_path) -> None:
	video_path = str(tmp_path / "source.mp4")
	cmd = (
		"ffmpeg -y "
		"-f lavfi -i testsrc=size=320x240:rate=25 "
		"-f lavfi -i sine=frequency=1000:sample_rate=44100 "
		"-t 3 -shortest "
		"-c:v libx264 -preset ultrafast -crf 30 -pix_fmt yuv420p "
		"-c:a aac "
		f"\"{video_path}\""
	)
	subprocess.run(cmd, shell=True, check=True,
		stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
	output_dir = str(tmp_path / "output")
	encoder = gridencoder.VideoGridEncoder(output_dir)
	(grid_amount, last_stop_time, audio_name) = encoder.encode(video_path,
		"XXXXXXCats", "XXXXXClip1", 16, True, confirm.refuse, 10)
	assert grid_amount == 1
	assert last_stop_time == pytest.approx(3.0, abs=0.2)
	assert audio_name == "XXXXXClip1SND"
	texture = os.path.join(encoder.texture_dir("XXXXXXCats"), "XXXXXClip1_01.dds")
	assert os.path.isfile(texture)
	wavfile = os.path.join(encoder.sound_dir("XXXXXXCats"), "XXXXXClip1.wav")
	assert os.path.isfile(wavfile)

#============================================

def test_failed_audio_does_not_reuse_old_wav(tmp_path, monkeypatch) -> None:
	"""
	Ensure a wav left by an earlier run is not returned after ffmpeg fails.
	"""
	wavfile = str(tmp_path / "XXXXXClip1.wav")
	monkeypatch.setattr(ffmpeg_extract, "runCmd", lambda cmd, msg=False: 1)
	for convert in (
		lambda: ffmpeg.extractAudio("in.mp4", wavfile, max_seconds=3.0),
		lambda: ffmpeg.makeSilence(wavfile, 3.0),
	):
		with open(wavfile, 'wb') as handle:
			handle.write(b"RIFF old run")
		with pytest.raises(EncoderError) as info:
			convert()
		assert "returned 1" in str(info.value)
		assert not os.path.exists(wavfile)

#============================================

def test_project_passes_quality_to_encoder(tmp_path) -> None:
	video_path = str(tmp_path / "Clip1.mp4")
	with open(video_path, 'wb') as handle:
		handle.write(b"")
	project = VotwProject("Cats", video_path, output_dir=str(tmp_path / "out"),
		high_quality=True)
	assert project.encoder.dds_format() == "DXT5"
	assert project.plan()['high_quality'] is True
	project = VotwProject("Cats", video_path, output_dir=str(tmp_path / "out"))
	assert project.encoder.dds_format() == "DXT1"
