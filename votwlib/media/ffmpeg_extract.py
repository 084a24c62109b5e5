#!/usr/bin/env python3

import glob
import os
from votwlib.core import utils
from votwlib.core.errors import EncoderError

#============================================

def runCmd(cmd: str, msg: bool = False) -> int:
	return utils.runCmd(cmd)

#============================================

def removeStale(outfile: str) -> None:
	# ffmpeg may fail without touching outfile, a leftover would pass as output
	if os.path.isfile(outfile):
		os.remove(outfile)
	return

#============================================

def frameFilter(size: int, keep_aspect_ratio: bool = False) -> str:
	# textures are square; the 4:3 pad matches the in-game screens
	if keep_aspect_ratio:
		return (f"pad='max(iw,ih*4/3)':'max(ih,iw*3/4)':'(ow-iw)/2':'(oh-ih)/2',"
			f"scale={size}:{size}")
	return f"scale={size}:{size}"

#============================================

def extractFrames(movfile: str, frame_dir: str, framerate: int, size: int,
	keep_aspect_ratio: bool = False, imgcode: str = "frame") -> list:
	frame_pattern = os.path.join(frame_dir, f"{imgcode}%05d.png")
	cmd = "ffmpeg -y "
	cmd += f" -i \"{movfile}\" "
	cmd += " -an -sn "
	cmd += f" -filter:v \"fps={framerate},{frameFilter(size, keep_aspect_ratio)}\" "
	cmd += f" \"{frame_pattern}\" "
	returncode = runCmd(cmd)
	if returncode != 0:
		raise EncoderError(f"frame extraction failed on {movfile}: ffmpeg returned {returncode}")
	frames = sorted(glob.glob(os.path.join(frame_dir, f"{imgcode}*.png")))
	if len(frames) == 0:
		raise EncoderError(f"frame extraction failed: {movfile}")
	return frames

#============================================

def extractAudio(movfile: str, wavfile: str, samplerate: int = 44100,
	bitrate: int = 16, max_seconds: float = None) -> str:
	removeStale(wavfile)
	cmd = "ffmpeg -y "
	cmd += f" -i \"{movfile}\" "
	if max_seconds is not None:
		cmd += f" -t {max_seconds:.2f} "
	cmd += " -sn -vn "
	cmd += f" -acodec pcm_s{bitrate}le -ar {samplerate} -ac 2 "
	cmd += f" \"{wavfile}\" "
	returncode = runCmd(cmd)
	if returncode != 0 or not os.path.isfile(wavfile):
		raise EncoderError(f"extract audio failed on {movfile}: ffmpeg returned {returncode}")
	return wavfile

#============================================

def makeSilence(wavfile: str, seconds: float, samplerate: int = 44100,
	bitrate: int = 16) -> str:
	removeStale(wavfile)
	cmd = "ffmpeg -y "
	cmd += f" -f lavfi -i anullsrc=r={samplerate}:cl=stereo "
	cmd += f" -t {seconds:.2f} "
	cmd += f" -acodec pcm_s{bitrate}le "
	cmd += f" \"{wavfile}\" "
	returncode = runCmd(cmd)
	if returncode != 0 or not os.path.isfile(wavfile):
		raise EncoderError(f"make silence failed for {wavfile}: ffmpeg returned {returncode}")
	return wavfile
