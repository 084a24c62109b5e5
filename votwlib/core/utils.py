#!/usr/bin/env python3

import os
import re
import subprocess
import time
from votwlib.core.errors import AssetIOError

#============================================

_QUIET_MODE = False
_COMMAND_REPORTER = None
_COMMAND_COUNT = 0

#============================================

def set_quiet_mode(quiet: bool) -> None:
	global _QUIET_MODE
	_QUIET_MODE = bool(quiet)
	return

#============================================

def is_quiet_mode() -> bool:
	return _QUIET_MODE

#============================================

def status(message: str) -> None:
	if not _QUIET_MODE:
		print(message)
	return

#============================================

def set_command_reporter(reporter) -> None:
	"""
	Install a callable that receives command and checkpoint events.

	Events are dicts with an 'event' key of 'start', 'end' or 'checkpoint'.
	"""
	global _COMMAND_REPORTER
	_COMMAND_REPORTER = reporter
	return

#============================================

def clear_command_reporter() -> None:
	global _COMMAND_REPORTER, _COMMAND_COUNT
	_COMMAND_REPORTER = None
	_COMMAND_COUNT = 0
	return

#============================================

def command_prefix(index: int, total) -> str:
	if index is None or index <= 0:
		return ""
	if total is None or total <= 0:
		return f"[{index}]"
	return f"[{index}/{total}]"

#============================================

def _report(event: dict) -> None:
	if _COMMAND_REPORTER is not None:
		_COMMAND_REPORTER(event)
	return

#============================================

def report_checkpoint(label: str, **fields) -> None:
	event = {'event': 'checkpoint', 'label': label}
	event.update(fields)
	_report(event)
	return

#============================================

def runCmd(cmd: str) -> int:
	global _COMMAND_COUNT
	showcmd = cmd.strip()
	showcmd = re.sub("  *", " ", showcmd)
	_COMMAND_COUNT += 1
	if not _QUIET_MODE:
		print(f"CMD: '{showcmd}'")
	_report({'event': 'start', 'command': showcmd, 'index': _COMMAND_COUNT})
	t0 = time.time()
	proc = subprocess.Popen(showcmd, shell=True, stderr=subprocess.PIPE,
		stdout=subprocess.PIPE)
	proc.communicate()
	_report({'event': 'end', 'command': showcmd,
		'returncode': proc.returncode, 'seconds': time.time() - t0})
	return proc.returncode

#============================================

def ensure_file_exists(filepath: str) -> None:
	if not os.path.exists(filepath):
		raise AssetIOError(filepath, FileNotFoundError(2, "file not found", filepath))
	return

#============================================

def read_bytes(filepath: str) -> bytes:
	try:
		with open(filepath, 'rb') as handle:
			return handle.read()
	except OSError as exc:
		raise AssetIOError(filepath, exc) from exc

#============================================

def write_bytes_atomic(filepath: str, data: bytes) -> str:
	"""
	Write data next to filepath and move it into place.

	Args:
		filepath: Final output path; parent directories are created.
		data: Bytes to write.

	Returns:
		str: The written path.
	"""
	temp_path = filepath + ".partial"
	try:
		parent = os.path.dirname(filepath)
		if parent != "":
			os.makedirs(parent, exist_ok=True)
		with open(temp_path, 'wb') as handle:
			handle.write(data)
		os.replace(temp_path, filepath)
	except OSError as exc:
		if os.path.isfile(temp_path):
			try:
				os.remove(temp_path)
			except OSError:
				pass
		raise AssetIOError(filepath, exc) from exc
	return filepath

#============================================

def is_power_of_two(value: int) -> bool:
	return value > 0 and (value & (value - 1)) == 0

#============================================

def time_number_to_string(seconds: float) -> str:
	minutes = int(seconds // 60)
	remaining = seconds % 60
	return f"{minutes:02d}:{remaining:04.1f}"
