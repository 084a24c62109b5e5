#!/usr/bin/env python3

"""
FO4Edit (xEdit) script generation.

Used instead of patching the plugin templates when records have to be
appended to an esp that already exists or is full. The script copies the
template records once per video and renames them after the video tokens.
"""

import os
from votwlib.core import utils

#============================================

def pascal_quote(value: str) -> str:
	escaped = value.replace("'", "''")
	return f"'{escaped}'"

#============================================

def script_path(output_dir: str, mod_name: str) -> str:
	return os.path.join(output_dir, f"VotW_{mod_name}_xEdit.pas")

#============================================

HELPERS = """
function FindPlugin(name: string): IInterface;
var
	i: integer;
begin
	Result := nil;
	for i := 0 to FileCount - 1 do
		if SameText(GetFileName(FileByIndex(i)), name) then begin
			Result := FileByIndex(i);
			Exit;
		end;
end;

function FindRecord(plugin: IInterface; editorId: string): IInterface;
var
	i: integer;
begin
	Result := nil;
	for i := 0 to ElementCount(plugin) - 1 do begin
		Result := MainRecordByEditorID(ElementByIndex(plugin, i), editorId);
		if Assigned(Result) then
			Exit;
	end;
end;

procedure AddVideo(plugin: IInterface; templateId, editorId, fullName, soundName: string);
var
	template, added: IInterface;
begin
	template := FindRecord(plugin, templateId);
	if not Assigned(template) then begin
		AddMessage('Template record not found: ' + templateId);
		Exit;
	end;
	added := wbCopyElementToFile(template, plugin, True, True);
	SetElementEditValues(added, 'EDID', editorId);
	SetElementEditValues(added, 'FULL', fullName);
	AddMessage('Added ' + editorId + ' (sound ' + soundName + ')');
end;
"""

#============================================

def _video_calls(mod_token: str, video: dict, script_info: dict,
	plugin_var: str, suffixes: tuple) -> list:
	lines = []
	records = {
		'TV': script_info['tv_record'],
		'PR': script_info['pr_record'],
	}
	for suffix in suffixes:
		editor_id = f"VotW_{mod_token}{video['token']}{suffix}"
		lines.append(f"\tAddVideo({plugin_var}, {pascal_quote(records[suffix])}, "
			f"{pascal_quote(editor_id)}, {pascal_quote(video['name'])}, "
			f"{pascal_quote(video['audio_name'])});")
	return lines

#============================================

def build_script(mod, videos: list, script_info: dict) -> str:
	"""
	Render the xEdit script text.

	Args:
		mod: ModIdentifier of the batch.
		videos: Dicts with token, name, audio_name and drive_in keys.
		script_info: esp_name, tv_record, pr_record and di_esp_name.

	Returns:
		str: Pascal source for FO4Edit.
	"""
	lines = []
	lines.append("{")
	lines.append(f"\tVotW video records for {mod.name}.")
	lines.append(f"\tRun in FO4Edit with {script_info['esp_name']} loaded"
		f" (and {script_info['di_esp_name']} for DriveIn videos).")
	lines.append("")
	for video in videos:
		drive_in = "yes" if video['drive_in'] else "no"
		lines.append(f"\t{video['token']}  name={video['name']}  "
			f"sound={video['audio_name']}  drivein={drive_in}")
	lines.append("}")
	lines.append("unit userscript;")
	lines.append(HELPERS)
	lines.append("function Initialize: integer;")
	lines.append("var")
	lines.append("\tplugin, driveIn: IInterface;")
	lines.append("begin")
	lines.append("\tResult := 0;")
	lines.append(f"\tplugin := FindPlugin({pascal_quote(script_info['esp_name'])});")
	lines.append("\tif not Assigned(plugin) then begin")
	lines.append(f"\t\tAddMessage({pascal_quote('Plugin not loaded: ' + script_info['esp_name'])});")
	lines.append("\t\tResult := 1;")
	lines.append("\t\tExit;")
	lines.append("\tend;")
	for video in videos:
		lines.extend(_video_calls(mod.token, video, script_info, "plugin", ('TV', 'PR')))
	drive_in_videos = [video for video in videos if video['drive_in']]
	if len(drive_in_videos) > 0:
		lines.append(f"\tdriveIn := FindPlugin({pascal_quote(script_info['di_esp_name'])});")
		lines.append("\tif Assigned(driveIn) then begin")
		for video in drive_in_videos:
			for call in _video_calls(mod.token, video, script_info, "driveIn", ('TV',)):
				lines.append("\t" + call)
		lines.append("\tend else")
		lines.append(f"\t\tAddMessage({pascal_quote('Plugin not loaded: ' + script_info['di_esp_name'])});")
	lines.append("end;")
	lines.append("")
	lines.append("end.")
	return "\n".join(lines) + "\n"

#============================================

def generate_script(mod, videos: list, script_info: dict, output_dir: str) -> str:
	text = build_script(mod, videos, script_info)
	path = script_path(output_dir, mod.name)
	utils.write_bytes_atomic(path, text.encode('utf-8'))
	utils.status(f"wrote xEdit script {path}")
	return path
