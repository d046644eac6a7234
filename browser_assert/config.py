from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Mapping

DEFAULT_EXPECT_TIMEOUT_MS = 5000
DEFAULT_NAVIGATION_TIMEOUT_MS = 30000


def _env_bool(name: str, default: bool = False, environ: Mapping[str, str] | None = None) -> bool:
	env = os.environ if environ is None else environ
	val = (env.get(name) or '').strip().lower()
	if not val:
		return default
	return val in {'1', 'true', 'yes', 'y', 'on'}


def _env_int(name: str, default: int, environ: Mapping[str, str] | None = None) -> int:
	env = os.environ if environ is None else environ
	raw = (env.get(name) or '').strip()
	if not raw:
		return default
	try:
		val = int(raw)
	except Exception:
		return default
	return val if val > 0 else default


def _env_str(name: str, environ: Mapping[str, str] | None = None) -> str | None:
	env = os.environ if environ is None else environ
	val = (env.get(name) or '').strip()
	return val or None


@dataclass(frozen=True)
class Settings:
	cdp_url: str | None = None
	headless: bool = True
	browser: str = 'chromium'
	expect_timeout_ms: int = DEFAULT_EXPECT_TIMEOUT_MS
	navigation_timeout_ms: int = DEFAULT_NAVIGATION_TIMEOUT_MS
	record: bool = False
	log_level: str = 'WARNING'
	environ: Mapping[str, str] = field(default_factory=dict, repr=False)

	@classmethod
	def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
		env = os.environ if environ is None else environ
		browser = (_env_str('BROWSER_ASSERT_BROWSER', env) or 'chromium').lower()
		if browser not in {'chromium', 'firefox', 'webkit'}:
			browser = 'chromium'
		return cls(
			cdp_url=_env_str('BROWSER_ASSERT_CDP_URL', env),
			headless=_env_bool('BROWSER_ASSERT_HEADLESS', True, env),
			browser=browser,
			expect_timeout_ms=_env_int('BROWSER_ASSERT_EXPECT_TIMEOUT_MS', DEFAULT_EXPECT_TIMEOUT_MS, env),
			navigation_timeout_ms=_env_int('BROWSER_ASSERT_NAVIGATION_TIMEOUT_MS', DEFAULT_NAVIGATION_TIMEOUT_MS, env),
			record=_env_bool('BROWSER_ASSERT_RECORD', False, env),
			log_level=(_env_str('BROWSER_ASSERT_LOG_LEVEL', env) or 'WARNING').upper(),
			environ=env,
		)


def configure_logging(level: str = 'WARNING') -> logging.Logger:
	logging.basicConfig(
		stream=sys.stderr,
		level=getattr(logging, level, logging.WARNING),
		format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
		force=True,
	)
	# Prevent MCP SDK logs from polluting stdout (stdio transport).
	logging.getLogger('mcp').setLevel(logging.ERROR)
	logging.getLogger('mcp').propagate = False
	return logging.getLogger('browser-assert-mcp')
