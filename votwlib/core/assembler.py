#!/usr/bin/env python3

import os
from votwlib.core import patcher
from votwlib.core import templates
from votwlib.core import timing
from votwlib.core import utils
from votwlib.core.errors import EncoderError
from votwlib.core.errors import ValidationError
from votwlib.core.identifiers import VideoIdentifier
from votwlib import scriptwrite

#============================================

def plugin_path(output_dir: str, mod_name: str, drive_in: bool = False) -> str:
	if drive_in:
		return os.path.join(output_dir, f"VotW_{mod_name}_DriveIn.esp")
	return os.path.join(output_dir, f"VotW_{mod_name}.esp")

#============================================

def mesh_path(output_dir: str, role: str, mod_token: str, video_token: str) -> str:
	return os.path.join(output_dir, "meshes", "Videos", role, mod_token,
		f"{video_token}.nif")

#============================================

def apply_placeholders(buffer: bytearray, table: tuple, values: dict) -> int:
	patched = 0
	for (token, key, first_only) in table:
		patched += patcher.patch_token(buffer, token, values[key], first_only)
	return patched

#============================================

class AssetAssembler():
	def __init__(self, batch, template_set, encoder, confirm):
		self.batch = batch
		self.templates = template_set
		self.encoder = encoder
		self.confirm = confirm
		self.plugins = {}
		self.write_drive_in = False
		self.script_videos = []
		self.written = []
		self.validated = False

	#============================
	def validate(self) -> None:
		self.validated = True
		count = len(self.batch.videos)
		if self.batch.generate_script or count <= templates.PLUGIN_CAPACITY:
			return
		message = (f"You provided {count} videos but an esp can only support "
			f"{templates.PLUGIN_CAPACITY}, continue? (y/N) "
			"(an xEdit script can get around this limit) ")
		if not self.confirm(message):
			raise ValidationError("Too many videos")
		return

	#============================
	def run(self) -> list:
		"""
		Build every asset for the batch and return the written paths.
		"""
		if not self.validated:
			self.validate()
		mod = self.batch.mod
		self.plugins = {
			templates.PLUGIN_PRIMARY: self.templates.plugin_buffer(templates.PLUGIN_PRIMARY),
			templates.PLUGIN_DRIVEIN: self.templates.plugin_buffer(templates.PLUGIN_DRIVEIN),
		}
		total = len(self.batch.videos)
		for index, video in enumerate(self.batch.videos, start=1):
			utils.report_checkpoint('video', index=index, total=total,
				name=video['name'])
			utils.status(f"[{index}/{total}] {video['name']} ({video['framerate']} fps)")
			self._process_video(video)
		if self.batch.generate_script:
			path = scriptwrite.generate_script(mod, self.script_videos,
				self.batch.script_info, self.batch.output_dir)
			self.written.append(path)
		else:
			self._write_plugins()
		utils.report_checkpoint('finished', total=total)
		utils.status("\nFinished!")
		return self.written

	#============================
	def _process_video(self, video: dict) -> None:
		mod = self.batch.mod
		ident = VideoIdentifier(video['name'])
		framerate = video['framerate']
		result = self.encoder.encode(video['path'], mod.token, ident.token,
			self.batch.size, self.batch.keep_aspect_ratio, self.confirm, framerate)
		(grid_amount, last_stop_time, audio_name) = result
		if grid_amount < 1 or grid_amount > timing.GRID_SLOTS:
			raise EncoderError(
				f"{video['path']}: grid count {grid_amount} outside 1..{timing.GRID_SLOTS}")
		compact = grid_amount <= templates.COMPACT_GRID_LIMIT
		if compact:
			self.write_drive_in = True
		utils.status(f"  {grid_amount} grids, ends at "
			f"{utils.time_number_to_string(last_stop_time)}, audio {audio_name}")
		values = {
			'mod_token': mod.token,
			'mod_leading': mod.leading,
			'mod_trailing': mod.trailing,
			'video_token': ident.token,
			'video_trailing': ident.trailing,
			'audio_name': audio_name,
		}
		if self.batch.generate_script:
			self.script_videos.append({
				'token': ident.token,
				'name': ident.name,
				'audio_name': audio_name,
				'drive_in': compact,
			})
		else:
			roles = [templates.PLUGIN_PRIMARY]
			if compact:
				roles.append(templates.PLUGIN_DRIVEIN)
			for role in roles:
				self._patch_plugin(role, values)
		for role in templates.mesh_roles(grid_amount):
			buffer = self.build_mesh(role, grid_amount, last_stop_time,
				framerate, values)
			path = mesh_path(self.batch.output_dir, role, mod.token, ident.token)
			self.written.append(utils.write_bytes_atomic(path, bytes(buffer)))

	#============================
	def _patch_plugin(self, role: str, values: dict) -> None:
		buffer = self.plugins[role]
		if patcher.count(buffer, templates.PLUGIN_SLOT_TOKEN) == 0:
			utils.status(f"  warning: no free video slot left in {role} esp, "
				f"{values['video_token']} will not be added to it")
		apply_placeholders(buffer, templates.PLUGIN_PLACEHOLDERS, values)
		return

	#============================
	def build_mesh(self, role: str, grid_amount: int, last_stop_time: float,
		framerate: int, values: dict) -> bytearray:
		buffer = self.templates.mesh_buffer(role, grid_amount)
		apply_placeholders(buffer, templates.MESH_PLACEHOLDERS, values)
		timing.apply_grid_timing(buffer, grid_amount, last_stop_time, framerate)
		return buffer

	#============================
	def _write_plugins(self) -> None:
		output_dir = self.batch.output_dir
		mod_name = self.batch.mod.name
		primary = self.plugins[templates.PLUGIN_PRIMARY]
		self.written.append(utils.write_bytes_atomic(
			plugin_path(output_dir, mod_name), bytes(primary)))
		if self.write_drive_in:
			drive_in = self.plugins[templates.PLUGIN_DRIVEIN]
			self.written.append(utils.write_bytes_atomic(
				plugin_path(output_dir, mod_name, drive_in=True), bytes(drive_in)))
		return
