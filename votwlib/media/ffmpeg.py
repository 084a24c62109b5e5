#!/usr/bin/env python3

from votwlib.media.ffmpeg_extract import extractFrames
from votwlib.media.ffmpeg_extract import extractAudio
from votwlib.media.ffmpeg_extract import makeSilence
from votwlib.media.ffmpeg_extract import frameFilter

__all__ = [
	'extractFrames',
	'extractAudio',
	'makeSilence',
	'frameFilter',
]
