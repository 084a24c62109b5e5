#!/usr/bin/env python3

###
#turn a video into grid texture atlases and a sound file
###

import math
import os
import shutil
import tempfile
import numpy
from tqdm import tqdm
from PIL import Image
from votwlib.core import utils
from votwlib.core.errors import EncoderError
from votwlib.core.errors import ValidationError
from votwlib.media import ffmpeg
from votwlib import medialib

#===============================
GRID_COLUMNS = 16
GRID_ROWS = 16
FRAMES_PER_GRID = GRID_COLUMNS * GRID_ROWS
MAX_GRIDS = 24
NATIVE_FRAMERATE = 10
# block compressed formats Pillow can write, BC1 by default and BC3 for
# the high quality switch
DDS_FORMAT = "DXT1"
DDS_FORMAT_HIGH_QUALITY = "DXT5"

#===============================
def grid_layout(frame_count):
	"""
	Work out how many grids a clip fills and where the last one stops.

	The stop time is on the mesh's native 10 fps timeline, so a full grid
	always ends at 25.6 whatever the playback frame rate.
	"""
	if frame_count <= 0:
		raise EncoderError("video has no frames")
	grid_amount = int(math.ceil(frame_count / float(FRAMES_PER_GRID)))
	last_frames = frame_count - (grid_amount - 1) * FRAMES_PER_GRID
	last_stop_time = last_frames / float(NATIVE_FRAMERATE)
	return (grid_amount, last_stop_time)

#===============================
def tile_position(index, size):
	row = (index % FRAMES_PER_GRID) // GRID_COLUMNS
	col = index % GRID_COLUMNS
	return (row * size, col * size)

#===============================
class VideoGridEncoder(object):
	def __init__(self, output_dir="output", high_quality=False):
		self.output_dir = output_dir
		self.high_quality = high_quality
		self.imgcode = "frame"
		self.samplerate = 44100
		self.temp_dir = None
		self.keep_temp = False
		self.quiet = False

	#===============================
	def dds_format(self):
		if self.high_quality:
			return DDS_FORMAT_HIGH_QUALITY
		return DDS_FORMAT

	#===============================
	def texture_dir(self, mod_token):
		return os.path.join(self.output_dir, "textures", "Videos", mod_token)

	#===============================
	def sound_dir(self, mod_token):
		return os.path.join(self.output_dir, "sound", "Videos", mod_token)

	#===============================
	def audio_name(self, video_token):
		return "%sSND"%(video_token)

	#===============================
	def encode(self, video_path, mod_token, video_token, size,
		keep_aspect_ratio, confirm, framerate):
		if not os.path.isfile(video_path):
			raise EncoderError("video file not found: %s"%(video_path))
		temp_dir = self.temp_dir
		owns_temp = False
		if temp_dir is None:
			temp_dir = tempfile.mkdtemp(prefix="votw-frames-")
			owns_temp = True
		try:
			frames = ffmpeg.extractFrames(video_path, temp_dir, framerate, size,
				keep_aspect_ratio, self.imgcode)
			frames = self._limit_frames(frames, video_path, framerate, confirm)
			(grid_amount, last_stop_time) = grid_layout(len(frames))
			utils.report_checkpoint('frames', count=len(frames), grids=grid_amount)
			self._write_atlases(frames, mod_token, video_token, size)
			play_seconds = len(frames) / float(framerate)
			self._write_audio(video_path, mod_token, video_token, play_seconds)
		finally:
			if owns_temp and not self.keep_temp:
				shutil.rmtree(temp_dir, ignore_errors=True)
		return (grid_amount, last_stop_time, self.audio_name(video_token))

	#===============================
	def _limit_frames(self, frames, video_path, framerate, confirm):
		max_frames = FRAMES_PER_GRID * MAX_GRIDS
		if len(frames) <= max_frames:
			return frames
		max_seconds = max_frames / float(framerate)
		message = ("%s is too long at %d fps, only the first %s fit, "
			"cut it short? (y/N) ")%(os.path.basename(video_path), framerate,
			utils.time_number_to_string(max_seconds))
		if not confirm(message):
			raise ValidationError("Video too long: %s"%(video_path))
		return frames[:max_frames]

	#===============================
	def _write_atlases(self, frames, mod_token, video_token, size):
		out_dir = self.texture_dir(mod_token)
		os.makedirs(out_dir, exist_ok=True)
		quiet_mode = self.quiet or utils.is_quiet_mode()
		atlas = None
		grid_index = 0
		if quiet_mode:
			iter_frames = enumerate(frames)
		else:
			iter_frames = enumerate(tqdm(frames))
		for i, frame_file in iter_frames:
			if i % FRAMES_PER_GRID == 0:
				if atlas is not None:
					self._save_atlas(atlas, out_dir, video_token, grid_index)
				grid_index += 1
				atlas = numpy.zeros((GRID_ROWS * size, GRID_COLUMNS * size, 4),
					dtype=numpy.uint8)
			with Image.open(frame_file) as im:
				tile = numpy.asarray(im.convert("RGBA").resize((size, size)))
			(top, left) = tile_position(i, size)
			atlas[top:top + size, left:left + size] = tile
		if atlas is not None:
			self._save_atlas(atlas, out_dir, video_token, grid_index)
		return

	#===============================
	def _save_atlas(self, atlas, out_dir, video_token, grid_index):
		path = os.path.join(out_dir, "%s_%02d.dds"%(video_token, grid_index))
		im = Image.fromarray(atlas)
		try:
			im.save(path, "DDS", pixel_format=self.dds_format())
		except OSError as exc:
			raise EncoderError("could not write %s: %s"%(path, exc)) from exc
		return path

	#===============================
	def _write_audio(self, video_path, mod_token, video_token, play_seconds):
		out_dir = self.sound_dir(mod_token)
		os.makedirs(out_dir, exist_ok=True)
		wavfile = os.path.join(out_dir, "%s.wav"%(video_token))
		if medialib.hasAudio(video_path):
			ffmpeg.extractAudio(video_path, wavfile, samplerate=self.samplerate,
				max_seconds=play_seconds)
		else:
			ffmpeg.makeSilence(wavfile, play_seconds, samplerate=self.samplerate)
		return wavfile
