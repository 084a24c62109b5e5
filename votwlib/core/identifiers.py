#!/usr/bin/env python3

"""
Fixed-width identifier encodings.

Templates reserve 10-byte fields for mod and video names. Names are padded
with 'X' where they end up inside opaque tokens (editor IDs, file names) and
with spaces where they are shown as in-game text.
"""

from votwlib.core.errors import ValidationError

IDENT_LENGTH = 10

#============================================

def pad(name: str, fill_char: str, target_length: int, pad_leading: bool) -> str:
	if len(name) > target_length:
		raise ValidationError(
			f"{name} is too long, should be at most {target_length} characters")
	result = name
	while len(result) < target_length:
		if pad_leading:
			result = fill_char + result
		else:
			result = result + fill_char
	return result

#============================================

def check_name(name: str, kind: str) -> None:
	if name is None or name == "":
		raise ValidationError(f"{kind} name is empty")
	if len(name) > IDENT_LENGTH:
		raise ValidationError(
			f"Name {name} is too long. Max {IDENT_LENGTH} characters! "
			"Rename the video / use --video-name when using a single video "
			"/ use --short-names.")
	if not name.isascii():
		raise ValidationError(f"{kind} name {name} must be plain ASCII")
	return

#============================================

class ModIdentifier():
	def __init__(self, name: str):
		check_name(name, "mod")
		self.name = name
		self.token = pad(name, 'X', IDENT_LENGTH, True)
		self.leading = pad(name, ' ', IDENT_LENGTH, True)
		self.trailing = pad(name, ' ', IDENT_LENGTH, False)

#============================================

class VideoIdentifier():
	def __init__(self, name: str):
		check_name(name, "video")
		self.name = name
		self.token = pad(name, 'X', IDENT_LENGTH, True)
		self.trailing = pad(name, ' ', IDENT_LENGTH, False)
