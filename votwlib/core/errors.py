#!/usr/bin/env python3

"""
Error types raised by the asset pipeline.

Everything derives from RuntimeError so front ends can report any failure
the same way; the subclasses let callers tell a bad input apart from a
filesystem or encoder failure.
"""

#============================================

class VotwError(RuntimeError):
	pass

#============================================

class ValidationError(VotwError):
	"""Input rejected before any output file is touched."""
	pass

#============================================

class ConfirmationRequired(ValidationError):
	"""A warning needed interactive confirmation but none was allowed."""
	pass

#============================================

class AssetIOError(VotwError):
	def __init__(self, path: str, error: OSError):
		self.path = path
		self.error = error
		reason = getattr(error, 'strerror', None) or str(error)
		super().__init__(f"{path}: {reason}")

#============================================

class EncoderError(VotwError):
	"""The frame grid encoder could not produce its outputs."""
	pass
