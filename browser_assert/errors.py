from __future__ import annotations


class ToolError(Exception):
	"""Fatal tool failure, reported on the tool error channel instead of as a result."""


class PreconditionError(ToolError):
	pass


class RefResolutionError(ToolError):
	pass


class UnknownToolError(ToolError):
	pass
