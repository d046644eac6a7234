from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from browser_assert.config import DEFAULT_EXPECT_TIMEOUT_MS


@dataclass(frozen=True)
class TimeoutPolicy:
	timeout_ms: int = DEFAULT_EXPECT_TIMEOUT_MS


@dataclass(frozen=True)
class MatchOutcome:
	matched: bool
	diagnostic: str | None = None


def _playwright_expect() -> Callable[[Any], Any]:
	from playwright.async_api import expect

	return expect


class TextMatchEngine:
	"""Bounded, retrying containment check on top of Playwright's web-first assertions.

	``expect(locator).to_contain_text`` re-reads the element text until it matches or the
	timeout elapses, so late rendering is tolerated without a hand-written poll loop. Only the
	assertion failure is turned into an outcome; anything else Playwright raises propagates.
	"""

	def __init__(self, expect: Callable[[Any], Any] | None = None) -> None:
		self._expect = expect

	async def await_contains_text(self, locator: Any, text: str, policy: TimeoutPolicy) -> MatchOutcome:
		expect = self._expect or _playwright_expect()
		try:
			await expect(locator).to_contain_text(text, timeout=policy.timeout_ms)
		except AssertionError as exc:
			diagnostic = str(exc).strip() or f'Expected text {text!r} not found within {policy.timeout_ms}ms'
			return MatchOutcome(matched=False, diagnostic=diagnostic)
		return MatchOutcome(matched=True)
