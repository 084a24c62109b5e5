#!/usr/bin/env python3

from votwlib.core import confirm as confirm_policies
from votwlib.core import utils
from votwlib.core.assembler import AssetAssembler
from votwlib.core.loader import BatchLoader
from votwlib.core.templates import TemplateLoader
from votwlib.gridencoder import VideoGridEncoder

#============================================

class VotwProject():
	def __init__(self, mod_name: str = None, inputs=None, config_file: str = None,
		dry_run: bool = False, confirm=None, encoder=None, template_set=None,
		**options):
		loader = BatchLoader(mod_name, inputs, config_file=config_file, **options)
		self._batch = loader.load()
		self.dry_run = dry_run
		self.confirm = confirm or confirm_policies.ask_user
		self._template_loader = TemplateLoader(self._batch.template_dir,
			self._batch.input_esp, self._batch.input_esp_drive_in)
		self._template_set = template_set
		self.encoder = encoder or VideoGridEncoder(self._batch.output_dir,
			high_quality=self._batch.high_quality)
		self._sync_public_fields()

	#============================
	def _sync_public_fields(self) -> None:
		self.config_file = self._batch.config_file
		self.mod = self._batch.mod
		self.videos = self._batch.videos
		self.framerate = self._batch.framerate
		self.size = self._batch.size
		self.output_dir = self._batch.output_dir
		self.generate_script = self._batch.generate_script
		self.script_info = self._batch.script_info

	#============================
	def validate(self) -> AssetAssembler:
		if self._template_set is None:
			self._template_loader.validate()
		assembler = AssetAssembler(self._batch, self._template_set, self.encoder,
			self.confirm)
		assembler.validate()
		return assembler

	#============================
	def run(self) -> list:
		assembler = self.validate()
		if self.dry_run:
			utils.status("dry run: validation complete")
			return []
		if self._template_set is None:
			self._template_set = self._template_loader.load()
			assembler.templates = self._template_set
		return assembler.run()

	#============================
	def plan(self) -> dict:
		return {
			'mod_name': self.mod.name,
			'mod_token': self.mod.token,
			'size': self.size,
			'high_quality': self._batch.high_quality,
			'output_dir': self.output_dir,
			'generate_script': self.generate_script,
			'videos': [dict(video) for video in self.videos],
		}
