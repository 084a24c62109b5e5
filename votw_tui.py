#!/usr/bin/env python3

"""
Textual TUI wrapper for VotW batch conversion.
"""

# Standard Library
import argparse
import os
import re
import shlex
import sys
import threading
import time
import traceback

script_dir = os.path.dirname(os.path.abspath(__file__))
if script_dir not in sys.path:
	sys.path.insert(0, script_dir)

# PIP3 modules
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import RichLog, Static
from rich.text import Text

# local repo modules
from votwlib.core import confirm
from votwlib.core import utils
from votwlib.core.project import VotwProject

#============================================

NORD_COLORS = {
	'background': "#2E3440",
	'foreground': "#D8DEE9",
	'dim': "#4C566A",
	'header': "#88C0D0",
	'command': "#ECEFF4",
	'flags': "#81A1C1",
	'numbers': "#B48EAD",
	'paths': "#A3BE8C",
	'strings': "#EBCB8B",
	'error': "#BF616A",
}

#============================================

def parse_args():
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(description="VotW TUI wrapper")
	parser.add_argument('mod_name', nargs='?',
		help='name of the mod, at most 10 characters')
	parser.add_argument('-i', '--input', dest='input',
		help='video file or folder of videos to convert')
	parser.add_argument('-c', '--config', dest='config_file',
		help='yaml file with default settings and script info')
	parser.add_argument('-o', '--output-dir', dest='output_dir',
		help='output folder (default output)')
	parser.add_argument('-g', '--generate-script', dest='generate_script',
		action='store_true',
		help='write an FO4Edit script to add the records instead of esp files')
	parser.add_argument('-d', '--debug', dest='debug_log', action='store_true',
		help='write debug log to votw_tui.log in the current directory')
	parser.set_defaults(generate_script=None)
	args = parser.parse_args()
	return args

#============================================

class VotwTuiApp(App):
	BINDINGS = [
		("q", "quit", "Quit"),
	]

	CSS = """
	#root {
		height: 1fr;
	}

	#top_row {
		height: 30%;
		min-height: 8;
	}

	#left_panel {
		width: 40%;
		height: 1fr;
		border: solid gray;
	}

	#right_panel {
		width: 60%;
		height: 1fr;
		border: solid gray;
	}

	#metrics_title {
		height: 1;
		color: #88C0D0;
	}

	#metrics {
		height: 1fr;
	}

	#batch_title {
		height: 1;
		color: #88C0D0;
	}

	#batch_info {
		height: 1fr;
	}

	#footer_note {
		height: 1;
		color: #4C566A;
	}

	#log {
		height: 1fr;
		border: solid gray;
	}
	"""

	def __init__(self, mod_name: str = None, input_path: str = None,
		config_file: str = None, output_dir: str = None,
		generate_script: bool = None, debug_log: bool = False):
		super().__init__()
		self.mod_name = mod_name
		self.input_path = input_path
		self.config_file = config_file
		self.output_dir = output_dir
		self.generate_script = generate_script
		self.command_count = 0
		self.video_index = 0
		self.video_total = None
		self.current_summary = ""
		self.start_time = None
		self.finish_time = None
		self.error_text = None
		self.written = []
		self.metrics_widget = None
		self.batch_widget = None
		self.log_widget = None
		self.finished = False
		self.debug_mode = debug_log
		self.log_path = None
		self.log_lock = threading.Lock()
		if self.debug_mode:
			self.log_path = os.path.join(os.getcwd(), "votw_tui.log")
			self._reset_log()
			self._write_log(f"debug log: {self.log_path}")

	#============================
	def compose(self) -> ComposeResult:
		yield Static("VOTW TUI", id="header")
		with Vertical(id="root"):
			with Horizontal(id="top_row"):
				with Vertical(id="left_panel"):
					yield Static("Dashboard", id="metrics_title")
					yield Static("", id="metrics")
					yield Static("Press q to quit", id="footer_note")
				with Vertical(id="right_panel"):
					yield Static("Batch", id="batch_title")
					yield Static("", id="batch_info")
			yield RichLog(id="log", wrap=True, highlight=False)

	#============================
	def on_mount(self) -> None:
		self.metrics_widget = self.query_one("#metrics", Static)
		self.batch_widget = self.query_one("#batch_info", Static)
		self.log_widget = self.query_one(RichLog)
		self.start_time = time.time()
		thread = threading.Thread(target=self._run_batch, daemon=True)
		thread.start()
		self.set_interval(0.5, self._update_metrics)

	#============================
	def _run_batch(self) -> None:
		utils.set_quiet_mode(True)
		utils.set_command_reporter(self._report_event)
		try:
			# no terminal to prompt on, warnings become errors
			project = VotwProject(self.mod_name, self.input_path,
				config_file=self.config_file,
				output_dir=self.output_dir,
				generate_script=self.generate_script,
				confirm=confirm.refuse)
			self.call_from_thread(self._set_batch_info, project)
			self.written = project.run()
		except Exception as exc:
			self.call_from_thread(self._set_error, str(exc), traceback.format_exc())
		finally:
			utils.clear_command_reporter()
			utils.set_quiet_mode(False)
			self.call_from_thread(self._finish)

	#============================
	def _set_batch_info(self, project) -> None:
		self.video_total = len(project.videos)
		info = Text()
		info.append("Mod: ", style=NORD_COLORS['dim'])
		info.append(f"{project.mod.name} ({project.mod.token})",
			style=NORD_COLORS['strings'])
		info.append("\n")
		info.append("Output: ", style=NORD_COLORS['dim'])
		info.append(project.output_dir, style=NORD_COLORS['paths'])
		info.append("\n")
		info.append("Frame size: ", style=NORD_COLORS['dim'])
		info.append(str(project.size), style=NORD_COLORS['numbers'])
		info.append("\n")
		info.append("Videos: ", style=NORD_COLORS['dim'])
		names = ", ".join(video['name'] for video in project.videos)
		info.append(names, style=NORD_COLORS['foreground'])
		if self.debug_mode and self.log_path is not None:
			info.append("\n")
			info.append("Debug log: ", style=NORD_COLORS['dim'])
			info.append(self.log_path, style=NORD_COLORS['paths'])
		self.batch_widget.update(info)

	#============================
	def _set_error(self, text: str, trace_text: str = None) -> None:
		self.error_text = text
		if trace_text:
			self._write_log(trace_text)
		if self.log_widget is not None:
			self.log_widget.write(
				Text(f"error: {text}", style=f"bold {NORD_COLORS['error']}")
			)

	#============================
	def _finish(self) -> None:
		if self.log_widget is None:
			return
		self.finished = True
		if self.start_time is not None and self.finish_time is None:
			self.finish_time = time.time() - self.start_time
		if self.error_text is None:
			self.log_widget.write(f"complete: {len(self.written)} files written")
			self._write_log("complete")
		else:
			self.log_widget.write("complete with errors")
			self._write_log("complete with errors")
		self._update_metrics()

	#============================
	def _report_event(self, event: dict) -> None:
		self.call_from_thread(self._handle_event, event)

	#============================
	def _handle_event(self, event: dict) -> None:
		if self.log_widget is None:
			return
		event_type = event.get('event')
		if event_type == 'checkpoint':
			self._handle_checkpoint(event)
			return
		command = event.get('command', '')
		summary = self._summarize_command(command)
		if event_type == 'start':
			self.command_count = event.get('index', self.command_count + 1)
			self.current_summary = summary
			self.log_widget.write(self._highlight_command(command))
			self._write_log(f"start: {command}")
		if event_type == 'end':
			code = event.get('returncode', 0)
			if code != 0:
				self.log_widget.write(
					Text(f"error ({code}): {summary}", style=f"bold {NORD_COLORS['error']}")
				)
				self._write_log(f"error ({code}): {command}")
			else:
				self._write_log(f"end ({event.get('seconds', 0.0):.3f}s): {command}")
		self._update_metrics()

	#============================
	def _handle_checkpoint(self, event: dict) -> None:
		label = event.get('label')
		if label == 'video':
			self.video_index = event.get('index', self.video_index + 1)
			self.video_total = event.get('total', self.video_total)
			prefix = utils.command_prefix(self.video_index, self.video_total)
			self.log_widget.write("")
			self.log_widget.write(Text(f"{prefix} {event.get('name', '')}",
				style=f"bold {NORD_COLORS['header']}"))
		elif label == 'frames':
			self.log_widget.write(f"{event.get('count')} frames, "
				f"{event.get('grids')} grids")
		self._write_log(f"checkpoint: {event}")
		self._update_metrics()

	#============================
	def _write_log(self, message: str) -> None:
		if not self.debug_mode or self.log_path is None:
			return
		timestamp = time.strftime("%Y-%m-%d %H:%M:%S")
		line = f"[{timestamp}] {message}\n"
		with self.log_lock:
			with open(self.log_path, "a", encoding="utf-8") as handle:
				handle.write(line)

	#============================
	def _reset_log(self) -> None:
		if not self.debug_mode or self.log_path is None:
			return
		with self.log_lock:
			with open(self.log_path, "w", encoding="utf-8"):
				return

	#============================
	def _summarize_command(self, command: str) -> str:
		if command is None or command == "":
			return "command"
		try:
			parts = shlex.split(command)
		except ValueError:
			return command
		if len(parts) == 0:
			return command
		tool = os.path.basename(parts[0])
		if tool == "ffmpeg" and len(parts) > 1:
			return f"{tool}: {os.path.basename(parts[-1])}"
		return f"{tool}: {command}"

	#============================
	def _update_metrics(self) -> None:
		if self.metrics_widget is None:
			return
		if self.start_time is None:
			elapsed = 0.0
		elif self.finished:
			elapsed = self.finish_time or (time.time() - self.start_time)
		else:
			elapsed = time.time() - self.start_time
		if self.error_text is not None:
			status = "failed"
		elif self.finished:
			status = "done"
		else:
			status = "running"
		status_style = NORD_COLORS['foreground']
		if status == "failed":
			status_style = NORD_COLORS['error']
		elif status == "done":
			status_style = NORD_COLORS['paths']
		metrics = Text()
		metrics.append("Status: ", style=NORD_COLORS['dim'])
		metrics.append(status, style=status_style)
		metrics.append("\n")
		metrics.append("Elapsed: ", style=NORD_COLORS['dim'])
		metrics.append(self._format_duration(elapsed), style=NORD_COLORS['numbers'])
		metrics.append("\n")
		metrics.append("Video: ", style=NORD_COLORS['dim'])
		metrics.append(f"{self.video_index}", style=NORD_COLORS['numbers'])
		if self.video_total:
			metrics.append(f"/{self.video_total}", style=NORD_COLORS['numbers'])
		metrics.append(" | Commands: ", style=NORD_COLORS['dim'])
		metrics.append(f"{self.command_count}", style=NORD_COLORS['numbers'])
		metrics.append("\n")
		metrics.append("Current: ", style=NORD_COLORS['dim'])
		metrics.append(self.current_summary, style=NORD_COLORS['foreground'])
		self.metrics_widget.update(metrics)

	#============================
	def _highlight_command(self, command: str):
		if command is None or command == "":
			return ""
		styles = [
			(re.compile(r"--?[A-Za-z0-9][A-Za-z0-9_-]*"), NORD_COLORS['flags']),
			(re.compile(r"\b\d+(\.\d+)?\b"), NORD_COLORS['numbers']),
			(re.compile(r"'[^']*'|\"[^\"]*\""), NORD_COLORS['strings']),
		]
		text = Text(command, style=f"bold {NORD_COLORS['command']}")
		for pattern, style in styles:
			for match in pattern.finditer(command):
				text.stylize(style, match.start(), match.end())
		return text

	#============================
	def _format_duration(self, seconds: float) -> str:
		if seconds < 60:
			return f"{seconds:.1f}s"
		minutes = int(seconds // 60)
		remaining = seconds - (minutes * 60)
		if minutes < 60:
			return f"{minutes}m {remaining:04.1f}s"
		hours = int(minutes // 60)
		minutes = minutes - (hours * 60)
		return f"{hours}h {minutes:02d}m {remaining:04.1f}s"

#============================================

def main():
	args = parse_args()
	app = VotwTuiApp(args.mod_name, args.input,
		config_file=args.config_file,
		output_dir=args.output_dir,
		generate_script=args.generate_script,
		debug_log=args.debug_log)
	app.run()

#============================================

if __name__ == '__main__':
	main()
