from __future__ import annotations

import logging
from typing import Any

from browser_assert.config import Settings
from browser_assert.errors import RefResolutionError
from browser_assert.evaluator import ResolvedTarget
from browser_assert.snapshot import REF_ATTRIBUTE, PageSnapshot, capture_snapshot

logger = logging.getLogger('browser-assert-mcp')


def _looks_like_cdp_connect_error(exc: Exception) -> bool:
	msg = str(exc)
	return any(token in msg for token in ('connect ECONNREFUSED', 'ECONNREFUSED', 'connect_over_cdp', 'Failed to connect'))


class Tab:
	"""A page plus the most recent snapshot taken of it."""

	def __init__(self, page: Any) -> None:
		self.page = page
		self._snapshot: PageSnapshot | None = None
		self._snapshot_counter = 0

	def last_snapshot(self) -> PageSnapshot:
		if self._snapshot is None:
			raise RefResolutionError('No snapshot available. Capture a snapshot of the page first.')
		return self._snapshot

	async def capture_snapshot(self) -> PageSnapshot:
		self._snapshot_counter += 1
		self._snapshot = await capture_snapshot(self.page, self._snapshot_counter)
		return self._snapshot

	async def navigate(self, url: str, *, timeout_ms: int) -> PageSnapshot:
		await self.page.goto(url, wait_until='domcontentloaded', timeout=timeout_ms)
		return await self.capture_snapshot()

	def resolve_by_ref(self, ref: str) -> ResolvedTarget:
		locator = self.last_snapshot().ref_locator(self.page, ref)
		return ResolvedTarget(locator=locator, selector=f'[{REF_ATTRIBUTE}="{ref}"]')

	def resolve_document_root(self) -> ResolvedTarget:
		return ResolvedTarget(locator=self.page.locator('body'), selector='body')


class BrowserRuntime:
	def __init__(self, settings: Settings) -> None:
		self.settings = settings
		self._playwright = None
		self._browser = None
		self._context = None
		self._tab: Tab | None = None

	@property
	def started(self) -> bool:
		return self._browser is not None

	async def start(self) -> None:
		if self._browser is not None:
			return
		from playwright.async_api import async_playwright

		self._playwright = await async_playwright().start()
		if self.settings.cdp_url:
			try:
				self._browser = await self._playwright.chromium.connect_over_cdp(self.settings.cdp_url)
			except Exception as exc:
				if _looks_like_cdp_connect_error(exc):
					raise RuntimeError(f'Could not connect to Chrome at {self.settings.cdp_url}: {exc}') from exc
				raise
			contexts = list(getattr(self._browser, 'contexts', []))
			self._context = contexts[0] if contexts else await self._browser.new_context()
		else:
			browser_type = getattr(self._playwright, self.settings.browser)
			self._browser = await browser_type.launch(headless=self.settings.headless)
			self._context = await self._browser.new_context()
		logger.info('browser started (cdp=%s, headless=%s)', bool(self.settings.cdp_url), self.settings.headless)

	async def close(self) -> None:
		self._tab = None
		if self._browser:
			try:
				await self._browser.close()
			except Exception:
				logger.debug('browser close failed', exc_info=True)
		if self._playwright:
			try:
				await self._playwright.stop()
			except Exception:
				logger.debug('playwright stop failed', exc_info=True)
		self._browser = None
		self._context = None
		self._playwright = None

	async def current_tab(self) -> Tab:
		await self.start()
		if self._tab is not None:
			try:
				if not self._tab.page.is_closed():
					return self._tab
			except Exception:
				pass
		assert self._context is not None
		pages = [p for p in list(getattr(self._context, 'pages', [])) if not p.is_closed()]
		page = pages[-1] if pages else await self._context.new_page()
		self._tab = Tab(page)
		return self._tab
