#!/usr/bin/env python3

import os
import re
import yaml
from votwlib.core import utils
from votwlib.core.errors import ValidationError
from votwlib.core.identifiers import ModIdentifier
from votwlib.core.identifiers import check_name

#============================================

DEFAULTS = {
	'framerate': 10,
	'size': 512,
	'keep_aspect_ratio': False,
	'high_quality': False,
	'short_names': False,
	'generate_script': False,
	'output_dir': 'output',
	'template_dir': None,
	'esp': None,
	'desp': None,
	'video_name': None,
}

MAX_FRAME_SIZE = 1024
FPS_SUFFIX_RE = re.compile(r'^(\d+)(fps)?$', re.IGNORECASE)

#============================================

class BatchData():
	def __init__(self):
		self.config_file = None
		self.mod = None
		self.videos = []
		self.framerate = DEFAULTS['framerate']
		self.size = DEFAULTS['size']
		self.keep_aspect_ratio = False
		self.high_quality = False
		self.short_names = False
		self.generate_script = False
		self.output_dir = DEFAULTS['output_dir']
		self.template_dir = None
		self.input_esp = None
		self.input_esp_drive_in = None
		self.script_info = {}

#============================================

def video_name_and_framerate(path: str, default_framerate: int,
	short_names: bool = False) -> tuple:
	"""
	Derive a video name and frame rate from a file path.

	A trailing number in the stem overrides the frame rate, so
	"clip.30.mp4" and "clip.30fps.mp4" both play at 30 fps as "clip".

	Args:
		path: Video file path.
		default_framerate: Frame rate used when the name has no suffix.
		short_names: Cut names longer than 10 characters.

	Returns:
		tuple: (name, framerate)
	"""
	name = os.path.splitext(os.path.basename(path))[0]
	framerate = default_framerate
	parts = name.split('.')
	if len(parts) > 1:
		match = FPS_SUFFIX_RE.match(parts[-1])
		if match is not None:
			framerate = int(match.group(1))
			name = "_".join(parts[:-1])
	if short_names and len(name) > 10:
		name = name[:10]
	return (name.replace(' ', '_'), framerate)

#============================================

def scan_inputs(input_path: str) -> list:
	if not os.path.exists(input_path):
		raise ValidationError(f"File or folder does not exist: {input_path}")
	if os.path.isfile(input_path):
		return [input_path]
	paths = []
	for filename in sorted(os.listdir(input_path)):
		if filename.startswith('.'):
			continue
		path = os.path.join(input_path, filename)
		if os.path.isfile(path):
			paths.append(path)
	return paths

#============================================

class BatchLoader():
	def __init__(self, mod_name: str = None, inputs=None, config_file: str = None,
		**options):
		self.mod_name = mod_name
		self.inputs = inputs
		self.config_file = config_file
		self.options = options

	#============================
	def load(self) -> BatchData:
		batch = BatchData()
		batch.config_file = self.config_file
		config = {}
		if self.config_file is not None:
			config = self._load_yaml()
		settings = self._merge_settings(config)
		mod_name = self.mod_name or config.get('mod_name')
		if mod_name is None:
			raise ValidationError("mod name is required")
		batch.mod = ModIdentifier(str(mod_name))
		batch.framerate = self._parse_framerate(settings['framerate'], "framerate")
		batch.size = self._parse_size(settings['size'])
		batch.keep_aspect_ratio = bool(settings['keep_aspect_ratio'])
		batch.high_quality = bool(settings['high_quality'])
		batch.short_names = bool(settings['short_names'])
		batch.generate_script = bool(settings['generate_script'])
		batch.output_dir = settings['output_dir']
		batch.template_dir = settings['template_dir']
		batch.input_esp = settings['esp']
		batch.input_esp_drive_in = settings['desp']
		batch.script_info = self._parse_script_info(batch.mod.name,
			config.get('script', {}))
		inputs = self.inputs
		if inputs is None:
			inputs = config.get('input')
		if inputs is None:
			raise ValidationError("no input video or folder given")
		batch.videos = self._build_videos(inputs, batch, settings['video_name'])
		self._validate_videos(batch.videos)
		return batch

	#============================
	def _load_yaml(self) -> dict:
		utils.ensure_file_exists(self.config_file)
		file_size = os.path.getsize(self.config_file)
		if file_size > 10 ** 7:
			raise ValidationError("yaml file is larger than 10MB")
		with open(self.config_file, 'r') as data_file:
			data = yaml.safe_load(data_file)
		if data is None:
			return {}
		if not isinstance(data, dict):
			raise ValidationError("config yaml must be a mapping at the top level")
		return data

	#============================
	def _merge_settings(self, config: dict) -> dict:
		settings = {}
		for key, default in DEFAULTS.items():
			value = self.options.get(key)
			if value is None:
				value = config.get(key, default)
			settings[key] = value
		return settings

	#============================
	def _parse_framerate(self, raw_value, label: str) -> int:
		try:
			framerate = int(raw_value)
		except (TypeError, ValueError):
			raise ValidationError(f"{label} must be a whole number, got {raw_value}")
		if framerate <= 0:
			raise ValidationError(f"{label} must be positive, got {framerate}")
		return framerate

	#============================
	def _parse_size(self, raw_value) -> int:
		try:
			size = int(raw_value)
		except (TypeError, ValueError):
			raise ValidationError(f"frame size must be a whole number, got {raw_value}")
		if not utils.is_power_of_two(size):
			raise ValidationError(f"{size} is not a power of 2 (e.g. 128, 256, 512)")
		if size > MAX_FRAME_SIZE:
			raise ValidationError(
				f"It is not recommended to have a frame size over {MAX_FRAME_SIZE}")
		return size

	#============================
	def _parse_script_info(self, mod_name: str, script: dict) -> dict:
		if script is None:
			script = {}
		if not isinstance(script, dict):
			raise ValidationError("script must be a mapping")
		return {
			'esp_name': script.get('esp_name', f"VotW_{mod_name}.esp"),
			'tv_record': script.get('tv_record', "VotW_TemplateTV"),
			'pr_record': script.get('pr_record', "VotW_TemplatePR"),
			'di_esp_name': script.get('di_esp_name', f"VotW_{mod_name}_DriveIn.esp"),
		}

	#============================
	def _build_videos(self, inputs, batch: BatchData, video_name: str) -> list:
		if isinstance(inputs, str):
			paths = scan_inputs(inputs)
		else:
			paths = []
			for entry in inputs:
				paths.extend(scan_inputs(entry))
		if len(paths) == 0:
			raise ValidationError("no video files found")
		videos = []
		for path in paths:
			(name, framerate) = video_name_and_framerate(path, batch.framerate,
				batch.short_names)
			if len(paths) == 1 and video_name is not None:
				name = video_name
			framerate = self._parse_framerate(framerate, f"framerate of {path}")
			videos.append({'name': name, 'path': path, 'framerate': framerate})
		return videos

	#============================
	def _validate_videos(self, videos: list) -> None:
		seen = set()
		for video in videos:
			check_name(video['name'], "video")
			if video['name'] in seen:
				raise ValidationError(
					f"Cannot have two videos with the same name: {video['name']}")
			seen.add(video['name'])
		return
