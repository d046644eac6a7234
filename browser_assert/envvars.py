from __future__ import annotations

import re
from typing import Mapping

_PLACEHOLDER = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)\}')


def expand_env_vars(template: str, environ: Mapping[str, str]) -> str:
	"""Substitute ``${NAME}`` placeholders from ``environ``.

	Unknown names are left untouched so the literal placeholder is what gets matched.
	"""

	def _replace(match: re.Match[str]) -> str:
		value = environ.get(match.group(1))
		return match.group(0) if value is None else value

	return _PLACEHOLDER.sub(_replace, template)
