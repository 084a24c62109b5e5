#!/usr/bin/env python3

import os
import struct
import sys
import unittest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

from votwlib.core import patcher
from votwlib.core.errors import ValidationError

#============================================

class TokenPatchTest(unittest.TestCase):
	#============================================
	def test_replace_all_clears_every_match(self) -> None:
		"""Ensure every token is replaced with a padded value in place."""
		buffer = bytearray(b"..AUTOCIDENT..AUTOCIDENT.AUTOCIDENT")
		size = len(buffer)
		replaced = patcher.replace_all(buffer, "AUTOCIDENT", "Clip1")
		self.assertEqual(replaced, 3)
		self.assertEqual(len(buffer), size)
		self.assertEqual(patcher.count(buffer, "AUTOCIDENT"), 0)
		self.assertEqual(patcher.count(buffer, "XXXXXClip1"), 3)

	#============================================
	def test_replace_all_without_match(self) -> None:
		buffer = bytearray(b"nothing to see")
		self.assertEqual(patcher.replace_all(buffer, "AUTOCIDENT", "Clip1"), 0)
		self.assertEqual(bytes(buffer), b"nothing to see")

	#============================================
	def test_count_is_non_overlapping(self) -> None:
		self.assertEqual(patcher.count(b"AAAAA", "AA"), 2)
		self.assertEqual(patcher.count(b"", "AA"), 0)

	#============================================
	def test_replace_first_only_once(self) -> None:
		buffer = bytearray(b"AUTOVIDENT|AUTOVIDENT")
		self.assertEqual(patcher.replace_first(buffer, "AUTOVIDENT", "One"), 1)
		self.assertEqual(bytes(buffer), b"XXXXXXXOne|AUTOVIDENT")
		self.assertEqual(patcher.replace_first(buffer, "AUTOVIDENT", "Two"), 1)
		self.assertEqual(bytes(buffer), b"XXXXXXXOne|XXXXXXXTwo")
		self.assertEqual(patcher.replace_first(buffer, "AUTOVIDENT", "Three"), 0)

	#============================================
	def test_replace_first_twice_is_noop(self) -> None:
		"""Ensure a single token is gone after the first replacement."""
		buffer = bytearray(b"--ZAUTONIDEN--")
		patcher.replace_first(buffer, "ZAUTONIDEN", "Clip1     ")
		self.assertEqual(patcher.count(buffer, "ZAUTONIDEN"), 0)
		before = bytes(buffer)
		patcher.replace_first(buffer, "ZAUTONIDEN", "Other     ")
		self.assertEqual(bytes(buffer), before)

	#============================================
	def test_variable_width_token(self) -> None:
		buffer = bytearray(b"[AUTOIDENTSOUND]")
		patcher.replace_first(buffer, "AUTOIDENTSOUND", "XXXXXClip1SND")
		self.assertEqual(bytes(buffer), b"[XXXXXXClip1SND]")

	#============================================
	def test_replacement_too_long_raises(self) -> None:
		buffer = bytearray(b"AUTOCIDENT")
		with self.assertRaises(ValidationError):
			patcher.replace_all(buffer, "AUTOCIDENT", "ElevenChars")

	#============================================
	def test_locate_and_patch_token(self) -> None:
		buffer = bytearray(b"abcAUTOMIDENTdef")
		self.assertEqual(patcher.locate_token(buffer, "AUTOMIDENT"), 3)
		self.assertEqual(patcher.locate_token(buffer, "AUTOMIDENT", 4), -1)
		patcher.patch_token(buffer, "AUTOMIDENT", "      Cats")
		self.assertEqual(bytes(buffer), b"abc      Catsdef")

#============================================

class FloatPatchTest(unittest.TestCase):
	#============================================
	def test_unaligned_sentinel_is_patched(self) -> None:
		"""Ensure a sentinel at an odd offset is found and rewritten."""
		buffer = bytearray(b"\xaa\xbb\xcc" + struct.pack('<f', 121201.0) + b"\xdd")
		patched = patcher.patch_floats(buffer, 121201.0, 12.8)
		self.assertEqual(patched, 1)
		self.assertEqual(bytes(buffer[3:7]), struct.pack('<f', 12.8))
		self.assertEqual(bytes(buffer[:3]), b"\xaa\xbb\xcc")
		self.assertEqual(buffer[7], 0xdd)

	#============================================
	def test_near_value_untouched(self) -> None:
		"""Ensure only bit-exact matches are rewritten."""
		exact = struct.pack('<f', 141405.0)
		near = bytearray(exact)
		near[0] ^= 0x01
		buffer = bytearray(bytes(near) + b"\x00" + exact)
		patched = patcher.patch_floats(buffer, 141405.0, 0.0)
		self.assertEqual(patched, 1)
		self.assertEqual(bytes(buffer[:4]), bytes(near))
		self.assertEqual(bytes(buffer[5:9]), struct.pack('<f', 0.0))

	#============================================
	def test_every_occurrence_and_buffer_end(self) -> None:
		sentinel = struct.pack('<f', 1313.0)
		buffer = bytearray(sentinel + b"\x01\x02" + sentinel + sentinel)
		patched = patcher.patch_sentinel_float(buffer, 1313.0, 2.0)
		self.assertEqual(patched, 3)
		self.assertEqual(patcher.count(buffer, sentinel), 0)
		self.assertEqual(bytes(buffer[-4:]), struct.pack('<f', 2.0))

	#============================================
	def test_missing_sentinel(self) -> None:
		buffer = bytearray(b"\x00" * 16)
		self.assertEqual(patcher.patch_floats(buffer, 121224.0, 1.0), 0)
		self.assertEqual(bytes(buffer), b"\x00" * 16)

#============================================

def main() -> None:
	"""Run the unit tests."""
	unittest.main()

#============================================

if __name__ == "__main__":
	main()
