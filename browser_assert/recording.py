from __future__ import annotations

import json
import logging
from collections import deque
from dataclasses import dataclass

logger = logging.getLogger('browser-assert-mcp')


@dataclass(frozen=True)
class TraceEntry:
	title: str
	code: str


def _py_str(value: str) -> str:
	return json.dumps(value, ensure_ascii=False)


def contain_text_entry(*, against: str, selector: str, expected: str, element: str | None = None) -> TraceEntry:
	if against == 'page':
		target = 'page'
	elif element:
		target = f'element {_py_str(element)}'
	else:
		target = f'element {selector}'
	title = f'Assert {target} contains text {_py_str(expected)}'
	code = f'await expect(page.locator({_py_str(selector)})).to_contain_text({_py_str(expected)})'
	return TraceEntry(title=title, code=code)


class Recorder:
	"""Keeps the most recent ``max_entries`` checks; older ones are only in the log."""

	def __init__(self, *, enabled: bool = False, max_entries: int = 200) -> None:
		self.enabled = enabled
		self.entries: deque[TraceEntry] = deque(maxlen=max(1, max_entries))

	def emit(self, entry: TraceEntry) -> None:
		if not self.enabled:
			return
		self.entries.append(entry)
		logger.info('%s', entry.title)
		logger.info('%s', entry.code)
