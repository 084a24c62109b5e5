#python wrapper for ffprobe

import json
import subprocess
from votwlib.core.errors import EncoderError

#===============================
def getMediaInfo(mediafile):
	cmd = "ffprobe -v error -show_format -show_streams -of json \"%s\""%(mediafile)
	proc = subprocess.Popen(cmd, shell=True,
		stderr=subprocess.PIPE, stdout=subprocess.PIPE)
	stdout, stderr = proc.communicate()
	if proc.returncode != 0:
		raise EncoderError("ffprobe failed on %s: %s"%(mediafile,
			stderr.decode('utf-8', 'replace').strip()))
	return json.loads(stdout)

#===============================
def hasAudio(mediafile):
	data = getMediaInfo(mediafile)
	for stream in data.get('streams', []):
		if stream.get('codec_type') == 'audio':
			return True
	return False
