#!/usr/bin/env python3

"""
Per-grid timing values written into mesh templates.

Mesh templates animate on a native 10 fps timeline. Every grid slot owns two
sentinel floats: 141400+slot for the texture controller stop time and
121200+slot for the text key that triggers the next grid. One more sentinel,
1313, holds the global playback speed.

Values are computed in float32 because that is what the templates store.
"""

import numpy
from votwlib.core import patcher

GRID_SLOTS = 24
NATIVE_FRAMERATE = 10
FULL_GRID_SECONDS = numpy.float32(25.6)
TEXTKEY_SENTINEL_BASE = 121200
CONTROLLER_SENTINEL_BASE = 141400
SPEED_SENTINEL = 1313.0

#============================================

def controller_float(slot: int, grid_amount: int, last_stop_time: float) -> float:
	if slot < grid_amount:
		return float(FULL_GRID_SECONDS)
	if slot == grid_amount:
		return float(numpy.float32(last_stop_time))
	return 0.0

#============================================

def textkey_float(controller: float, frame_rate: int) -> float:
	if controller == 0.0 or frame_rate == NATIVE_FRAMERATE:
		return controller
	value = numpy.float32(controller) / numpy.float32(frame_rate)
	value = value * numpy.float32(NATIVE_FRAMERATE)
	return float(value)

#============================================

def speed_float(frame_rate: int) -> float:
	return float(numpy.float32(frame_rate) / numpy.float32(NATIVE_FRAMERATE))

#============================================

def grid_values(slot: int, grid_amount: int, last_stop_time: float,
	frame_rate: int) -> tuple:
	"""
	Compute the (controller, textkey) pair for one grid slot.

	Args:
		slot: Grid slot, 1..24.
		grid_amount: Number of grids the video occupies, 1..24.
		last_stop_time: Stop time of the final occupied grid in seconds.
		frame_rate: Playback frame rate of the video.

	Returns:
		tuple: (controller_float, textkey_float)
	"""
	controller = controller_float(slot, grid_amount, last_stop_time)
	return (controller, textkey_float(controller, frame_rate))

#============================================

def grid_table(grid_amount: int, last_stop_time: float, frame_rate: int) -> list:
	table = []
	for slot in range(1, GRID_SLOTS + 1):
		(controller, textkey) = grid_values(slot, grid_amount,
			last_stop_time, frame_rate)
		table.append({'slot': slot, 'controller': controller, 'textkey': textkey})
	return table

#============================================

def apply_grid_timing(buffer: bytearray, grid_amount: int, last_stop_time: float,
	frame_rate: int) -> int:
	# every slot is driven, unused ones to zero, so no sentinel survives
	patched = 0
	for row in grid_table(grid_amount, last_stop_time, frame_rate):
		slot = row['slot']
		patched += patcher.patch_sentinel_float(buffer,
			float(TEXTKEY_SENTINEL_BASE + slot), row['textkey'])
		patched += patcher.patch_sentinel_float(buffer,
			float(CONTROLLER_SENTINEL_BASE + slot), row['controller'])
	patched += patcher.patch_sentinel_float(buffer, SPEED_SENTINEL,
		speed_float(frame_rate))
	return patched
