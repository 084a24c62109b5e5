#!/usr/bin/env python3

"""
Make textures, .esp and .nif files for a Videos of the Wasteland mod.

Run with a mod name of your choice and a video file or folder of videos.
To add videos to an existing esp, pass it with --esp (and --desp); otherwise
a new esp is made in the output folder, replacing any older one there.
An esp holds at most 10 videos. Needs ffmpeg and ffprobe on the PATH.
"""

import argparse
import sys
import yaml
from votwlib.core import confirm
from votwlib.core.errors import VotwError
from votwlib.core.project import VotwProject

#============================================

def parse_args():
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(description=__doc__,
		formatter_class=argparse.RawDescriptionHelpFormatter)
	parser.add_argument('mod_name', nargs='?',
		help='name of the mod, at most 10 characters')
	parser.add_argument('-i', '--input', dest='input',
		help='video file or folder of videos to convert')
	parser.add_argument('-n', '--video-name', dest='video_name',
		help='name for a single input video, at most 10 characters')
	parser.add_argument('--esp', dest='esp', metavar='ESP_FILE',
		help='existing esp to append to, a copy is written to the output folder')
	parser.add_argument('--desp', dest='desp', metavar='DRIVEIN_ESP_FILE',
		help='existing DriveIn esp to append to')
	parser.add_argument('-s', '--size', dest='size', type=int,
		help='frame size in pixels, a power of two up to 1024 (default 512)')
	parser.add_argument('-k', '--keep-aspect-ratio', dest='keep_aspect_ratio',
		action='store_true', help='refit input to 4:3 which fits the TVs better')
	parser.add_argument('-q', '--quality', dest='high_quality', action='store_true',
		help='higher quality textures, double the file size and slower to make')
	parser.add_argument('--short-names', dest='short_names', action='store_true',
		help='cut names longer than 10 characters instead of failing')
	parser.add_argument('-g', '--generate-script', dest='generate_script',
		action='store_true',
		help='write an FO4Edit script to add the records instead of esp files')
	parser.add_argument('-y', '--yes', dest='confirm_mode', action='store_const',
		const='yes', help='say yes to all warnings')
	parser.add_argument('-r', '--framerate', dest='framerate', type=int,
		help='in-game frame rate (default 10), or name files like video.30.mp4')
	parser.add_argument('-o', '--output-dir', dest='output_dir',
		help='output folder (default output)')
	parser.add_argument('-t', '--template-dir', dest='template_dir',
		help='folder holding the esp and nif templates')
	parser.add_argument('-c', '--config', dest='config_file',
		help='yaml file with default settings and script info')
	parser.add_argument('-d', '--dry-run', dest='dry_run', action='store_true',
		help='validate only, do not convert')
	parser.add_argument('-p', '--dump-plan', dest='dump_plan', action='store_true',
		help='print the resolved batch and exit')
	parser.set_defaults(keep_aspect_ratio=None, high_quality=None, short_names=None,
		generate_script=None, confirm_mode='ask')
	args = parser.parse_args()
	return args

#============================================

def main():
	args = parse_args()
	try:
		project = VotwProject(args.mod_name, args.input,
			config_file=args.config_file,
			dry_run=args.dry_run,
			confirm=confirm.policy_for_mode(args.confirm_mode),
			video_name=args.video_name,
			esp=args.esp,
			desp=args.desp,
			size=args.size,
			keep_aspect_ratio=args.keep_aspect_ratio,
			high_quality=args.high_quality,
			short_names=args.short_names,
			generate_script=args.generate_script,
			framerate=args.framerate,
			output_dir=args.output_dir,
			template_dir=args.template_dir)
		if args.dump_plan:
			project.validate()
			print(yaml.safe_dump(project.plan(), sort_keys=False))
			return
		project.run()
	except VotwError as exc:
		print(f"error: {exc}", file=sys.stderr)
		sys.exit(1)


if __name__ == '__main__':
	main()
