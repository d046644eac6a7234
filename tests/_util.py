from __future__ import annotations

import json
from typing import Any

SUBMIT_SNAPSHOT = [
	{"ref": "s1e1", "depth": 0, "tag": "html", "role": "", "text": ""},
	{"ref": "s1e2", "depth": 1, "tag": "body", "role": "", "text": ""},
	{"ref": "s1e3", "depth": 2, "tag": "button", "role": "", "text": "Submit"},
]


def tool_text(result: Any) -> str:
	"""Text of the first content block of a ``CallToolResult``."""
	content = getattr(result, "content", None) or []
	return getattr(content[0], "text", "") if content else ""


def tool_json(result: Any) -> Any:
	text = tool_text(result)
	try:
		return json.loads(text)
	except Exception as exc:  # noqa: BLE001
		raise AssertionError(f"Expected JSON tool response, got: {text!r}") from exc


class FakeLocator:
	def __init__(self, page: "FakePage", selector: str) -> None:
		self.page = page
		self.selector = selector

	def inner_text(self) -> str:
		return self.page.text_for(self.selector)


class FakePage:
	"""Just enough of a Playwright page for snapshot capture and locator lookups."""

	def __init__(self, *, body: str = "Submit", elements: dict[str, str] | None = None, snapshot: list | None = None) -> None:
		self.body = body
		self.elements = {"s1e3": "Submit"} if elements is None else elements
		self.snapshot = SUBMIT_SNAPSHOT if snapshot is None else snapshot
		self.url = "about:blank"
		self.closed = False
		self.evaluate_calls: list[Any] = []
		self.goto_calls: list[tuple[str, dict]] = []

	def text_for(self, selector: str) -> str:
		if selector == "body":
			return self.body
		for ref, text in self.elements.items():
			if selector == f'[data-assert-ref="{ref}"]':
				return text
		return ""

	def locator(self, selector: str) -> FakeLocator:
		return FakeLocator(self, selector)

	async def evaluate(self, script: str, arg: Any = None) -> Any:
		self.evaluate_calls.append(arg)
		snapshot_id = arg[0] if arg else 1
		out: list[Any] = []
		for e in self.snapshot:
			if isinstance(e, dict) and isinstance(e.get("ref"), str):
				e = dict(e, ref=e["ref"].replace("s1", f"s{snapshot_id}", 1))
			out.append(e)
		return out

	async def goto(self, url: str, **kwargs: Any) -> None:
		self.goto_calls.append((url, kwargs))
		self.url = url

	async def title(self) -> str:
		return "Title"

	def is_closed(self) -> bool:
		return self.closed


class _FakeExpectation:
	def __init__(self, locator: FakeLocator, calls: list) -> None:
		self.locator = locator
		self.calls = calls

	async def to_contain_text(self, expected: str, *, timeout: float | None = None) -> None:
		self.calls.append((self.locator.selector, expected, timeout))
		actual = self.locator.inner_text()
		if expected not in actual:
			raise AssertionError(
				f"Locator expected to contain text '{expected}'\nActual value: {actual}\nCall log:\n  - waiting for {self.locator.selector}"
			)


class FakeExpect:
	"""Stands in for playwright's ``expect``; records (selector, text, timeout) per check."""

	def __init__(self) -> None:
		self.calls: list[tuple[str, str, float | None]] = []

	def __call__(self, locator: FakeLocator) -> _FakeExpectation:
		return _FakeExpectation(locator, self.calls)


class FakeRuntime:
	def __init__(self, tab: Any) -> None:
		self.tab = tab
		self.closed = False

	async def current_tab(self) -> Any:
		return self.tab

	async def close(self) -> None:
		self.closed = True
