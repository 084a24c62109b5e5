#!/usr/bin/env python3

"""
Template buffers and the placeholder tables that apply to them.

A TemplateSet is built once at startup from a template directory (the bundled
one by default) and optional user plugin files, and is handed to the
assembler. Nothing here is module-level mutable state.
"""

import os
from votwlib.core import utils
from votwlib.core.errors import ValidationError

#============================================

PLUGIN_EXTENSION = ".esp"
COMPACT_GRID_LIMIT = 8
PLUGIN_CAPACITY = 10

PLUGIN_PRIMARY = 'primary'
PLUGIN_DRIVEIN = 'drivein'

MESH_TELEVISION = 'Television'
MESH_PROJECTOR = 'Projector'
MESH_DRIVEIN = 'DriveIn'

FAMILY_8 = 8
FAMILY_24 = 24

DEFAULT_TEMPLATE_DIR = os.path.join(
	os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
	"assets", "templates")

PLUGIN_FILES = {
	PLUGIN_PRIMARY: "TemplateVideos_10.esp",
	PLUGIN_DRIVEIN: "TemplateDriveIn_10.esp",
}

MESH_FILES = {
	(MESH_TELEVISION, FAMILY_8): "TV 8 Grids.nif",
	(MESH_TELEVISION, FAMILY_24): "TV 24 Grids.nif",
	(MESH_PROJECTOR, FAMILY_8): "PR 8 Grids.nif",
	(MESH_PROJECTOR, FAMILY_24): "PR 24 Grids.nif",
	(MESH_DRIVEIN, FAMILY_8): "DI 8 Grids.nif",
}

#============================================

# (token, value key, first match only), applied in order.
# AUTOCIDENT and AUTOMIDENT mean different things in plugins and meshes;
# each role keeps its own table instead of sharing the literal.
PLUGIN_PLACEHOLDERS = (
	("AUTOCIDENT", 'mod_token', False),
	("AUTOVIDENT", 'video_token', True),
	("AUTOSIDENT", 'video_token', True),
	("AUTOPIDENT", 'video_token', True),
	("AUTOTIDENT", 'mod_trailing', False),
	("AUTOMIDENT", 'mod_leading', False),
	("ZAUTONIDEN", 'video_trailing', True),
	("AUTOIDENTSOUND", 'audio_name', True),
)

MESH_PLACEHOLDERS = (
	("AUTOCIDENT", 'video_token', False),
	("AUTOMIDENT", 'mod_token', False),
)

# one free slot in a plugin template holds one of these
PLUGIN_SLOT_TOKEN = "AUTOVIDENT"

#============================================

def mesh_family(grid_amount: int) -> int:
	if grid_amount <= COMPACT_GRID_LIMIT:
		return FAMILY_8
	return FAMILY_24

#============================================

def mesh_roles(grid_amount: int) -> tuple:
	if grid_amount <= COMPACT_GRID_LIMIT:
		return (MESH_TELEVISION, MESH_PROJECTOR, MESH_DRIVEIN)
	return (MESH_TELEVISION, MESH_PROJECTOR)

#============================================

def check_plugin_path(path: str, label: str) -> None:
	if not os.path.isfile(path):
		raise ValidationError(f"Given {label} file does not exist: {path}")
	extension = os.path.splitext(path)[1]
	if extension.lower() != PLUGIN_EXTENSION:
		raise ValidationError(
			f"Given {label} file is not an {PLUGIN_EXTENSION} file: {path}")
	return

#============================================

class TemplateSet():
	def __init__(self, plugins: dict, meshes: dict):
		self.plugins = dict(plugins)
		self.meshes = dict(meshes)

	#============================
	def plugin_buffer(self, role: str) -> bytearray:
		return bytearray(self.plugins[role])

	#============================
	def mesh_buffer(self, role: str, grid_amount: int) -> bytearray:
		key = (role, mesh_family(grid_amount))
		if key not in self.meshes:
			raise ValidationError(f"no {role} mesh template for {key[1]} grids")
		return bytearray(self.meshes[key])

#============================================

class TemplateLoader():
	def __init__(self, template_dir: str = None, input_esp: str = None,
		input_esp_drive_in: str = None):
		self.template_dir = template_dir or DEFAULT_TEMPLATE_DIR
		self.input_esp = input_esp
		self.input_esp_drive_in = input_esp_drive_in

	#============================
	def validate(self) -> None:
		if self.input_esp is not None:
			check_plugin_path(self.input_esp, "esp")
		if self.input_esp_drive_in is not None:
			check_plugin_path(self.input_esp_drive_in, "DriveIn esp")
		for filename in self._needed_files():
			path = os.path.join(self.template_dir, filename)
			if not os.path.isfile(path):
				raise ValidationError(f"template file missing: {path}")
		return

	#============================
	def load(self) -> TemplateSet:
		self.validate()
		plugins = {}
		plugins[PLUGIN_PRIMARY] = self._load_plugin(PLUGIN_PRIMARY, self.input_esp)
		plugins[PLUGIN_DRIVEIN] = self._load_plugin(PLUGIN_DRIVEIN,
			self.input_esp_drive_in)
		meshes = {}
		for key, filename in MESH_FILES.items():
			meshes[key] = utils.read_bytes(os.path.join(self.template_dir, filename))
		return TemplateSet(plugins, meshes)

	#============================
	def _load_plugin(self, role: str, user_path: str) -> bytes:
		if user_path is not None:
			return utils.read_bytes(user_path)
		return utils.read_bytes(os.path.join(self.template_dir, PLUGIN_FILES[role]))

	#============================
	def _needed_files(self) -> list:
		needed = list(MESH_FILES.values())
		if self.input_esp is None:
			needed.append(PLUGIN_FILES[PLUGIN_PRIMARY])
		if self.input_esp_drive_in is None:
			needed.append(PLUGIN_FILES[PLUGIN_DRIVEIN])
		return needed
