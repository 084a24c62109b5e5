#!/usr/bin/env python3

"""
In-place patching of binary template buffers.

The plugin and mesh templates are never parsed. Two assumptions about them
are all this module relies on:

* placeholder tokens are fixed-width ASCII runs that occur nowhere else in
  the template, so a plain substring search finds exactly the reserved
  fields, and the replacement is padded to the token width so no offset in
  the file moves;
* sentinel floats are little-endian float32 values (121201.0, 141401.0,
  1313.0, ...) that never appear as real data, so any bit-exact hit at any
  byte offset is a reserved slot.
"""

import struct
from votwlib.core.identifiers import pad

#============================================

def _encode(text) -> bytes:
	if isinstance(text, (bytes, bytearray)):
		return bytes(text)
	return text.encode('utf-8')

#============================================

def _padded_replacement(pattern: bytes, replacement) -> bytes:
	value = pad(_encode(replacement).decode('utf-8'), 'X', len(pattern), True)
	return _encode(value)

#============================================

def locate_token(buffer, token, start: int = 0) -> int:
	"""
	Return the offset of the next occurrence of token at or after start.

	Args:
		buffer: bytes or bytearray to search.
		token: str or bytes placeholder.
		start: Offset to begin the search at.

	Returns:
		int: Offset of the match, or -1 when the token is absent.
	"""
	return buffer.find(_encode(token), start)

#============================================

def count(buffer, pattern) -> int:
	needle = _encode(pattern)
	total = 0
	position = buffer.find(needle)
	while position != -1:
		total += 1
		position = buffer.find(needle, position + len(needle))
	return total

#============================================

def replace_all(buffer: bytearray, pattern, replacement) -> int:
	needle = _encode(pattern)
	new_bytes = _padded_replacement(needle, replacement)
	total = 0
	position = buffer.find(needle)
	while position != -1:
		end = position + len(needle)
		buffer[position:end] = new_bytes
		total += 1
		position = buffer.find(needle, end)
	return total

#============================================

def replace_first(buffer: bytearray, pattern, replacement) -> int:
	needle = _encode(pattern)
	new_bytes = _padded_replacement(needle, replacement)
	position = buffer.find(needle)
	if position == -1:
		return 0
	buffer[position:position + len(needle)] = new_bytes
	return 1

#============================================

def patch_token(buffer: bytearray, token, value, first_only: bool = False) -> int:
	if first_only:
		return replace_first(buffer, token, value)
	return replace_all(buffer, token, value)

#============================================

def patch_floats(buffer: bytearray, target: float, replacement: float) -> int:
	"""
	Overwrite every float32 equal to target with replacement.

	Every byte offset is checked, not just 4-byte aligned ones, and a hit
	must match target bit for bit.

	Args:
		buffer: Template bytes, modified in place.
		target: Sentinel value stored in the template.
		replacement: Value written over each sentinel.

	Returns:
		int: Number of sentinels patched.
	"""
	needle = struct.pack('<f', target)
	new_bytes = struct.pack('<f', replacement)
	total = 0
	position = buffer.find(needle)
	while position != -1:
		buffer[position:position + 4] = new_bytes
		total += 1
		position = buffer.find(needle, position + 1)
	return total

patch_sentinel_float = patch_floats
