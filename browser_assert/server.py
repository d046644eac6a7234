import asyncio
import logging
from typing import Any, Awaitable, Callable

import mcp.server.stdio
import mcp.types as types
from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions

from browser_assert import __version__
from browser_assert.browser import BrowserRuntime
from browser_assert.config import Settings, configure_logging
from browser_assert.errors import PreconditionError, UnknownToolError
from browser_assert.evaluator import AssertionEvaluator, parse_request
from browser_assert.recording import Recorder
from browser_assert.text_match import TextMatchEngine, TimeoutPolicy

SERVER_NAME = 'browser-assert'

logger = logging.getLogger('browser-assert-mcp')

ASSERT_CONTAIN_TEXT_TOOL = types.Tool(
	name='browser_assert_contain_text',
	description=(
		'Assert that the element or the whole page contains the expected text. It returns JSON having '
		'"result" (PASS or FAIL), "against" (assert against element or page) and "error" (details if result is FAIL).'
	),
	inputSchema={
		'type': 'object',
		'properties': {
			'element': {
				'type': 'string',
				'description': 'Human-readable element description used to obtain permission to interact with the element',
			},
			'ref': {'type': 'string', 'description': 'Exact target element reference from the page snapshot'},
			'against': {
				'type': 'string',
				'enum': ['element', 'page'],
				'description': 'Assert against the specified element or the whole page. If page, element and ref are not needed.',
			},
			'expected': {
				'type': 'string',
				'description': 'Expected text to be contained in the specified element or the whole page',
			},
		},
		'required': ['against', 'expected'],
	},
)

NAVIGATE_TOOL = types.Tool(
	name='browser_navigate',
	description='Navigate the current tab to a URL and return a snapshot with element refs.',
	inputSchema={
		'type': 'object',
		'properties': {
			'url': {'type': 'string', 'description': 'The URL to navigate to'},
		},
		'required': ['url'],
	},
)

SNAPSHOT_TOOL = types.Tool(
	name='browser_snapshot',
	description='Capture a snapshot of the current page; refs in it can be used by browser_assert_contain_text.',
	inputSchema={'type': 'object', 'properties': {}},
)

TOOLS = [NAVIGATE_TOOL, SNAPSHOT_TOOL, ASSERT_CONTAIN_TEXT_TOOL]


def _text(text: str) -> list[types.TextContent]:
	return [types.TextContent(type='text', text=text)]


def _snapshot_text(url: str, title: str, snapshot: str) -> str:
	return f'- Page URL: {url}\n- Page Title: {title}\n- Page Snapshot:\n```yaml\n{snapshot}\n```'


class BrowserAssertMCPServer:
	def __init__(self, settings: Settings | None = None, runtime: Any | None = None) -> None:
		self.settings = settings or Settings.from_env()
		self.server = Server(SERVER_NAME)
		self.runtime = runtime or BrowserRuntime(self.settings)
		self.recorder = Recorder(enabled=self.settings.record)
		self.matcher = TextMatchEngine()
		self._call_lock = asyncio.Lock()
		self._handlers: dict[str, Callable[[dict[str, Any]], Awaitable[list[types.TextContent]]]] = {
			'browser_navigate': self._handle_navigate,
			'browser_snapshot': self._handle_snapshot,
			'browser_assert_contain_text': self._handle_assert_contain_text,
		}
		self._setup_handlers()

	async def _handle_navigate(self, args: dict[str, Any]) -> list[types.TextContent]:
		url = args.get('url')
		if not isinstance(url, str) or not url.strip():
			raise PreconditionError('url must be a non-empty string')
		tab = await self.runtime.current_tab()
		snapshot = await tab.navigate(url.strip(), timeout_ms=self.settings.navigation_timeout_ms)
		title = await tab.page.title()
		return _text(_snapshot_text(tab.page.url, title, snapshot.render()))

	async def _handle_snapshot(self, args: dict[str, Any]) -> list[types.TextContent]:
		tab = await self.runtime.current_tab()
		snapshot = await tab.capture_snapshot()
		title = await tab.page.title()
		return _text(_snapshot_text(tab.page.url, title, snapshot.render()))

	async def _handle_assert_contain_text(self, args: dict[str, Any]) -> list[types.TextContent]:
		# Invalid requests fail before the browser is touched.
		request = parse_request(args)
		tab = await self.runtime.current_tab()
		evaluator = AssertionEvaluator(
			resolver=tab,
			matcher=self.matcher,
			environ=self.settings.environ,
			policy=TimeoutPolicy(timeout_ms=self.settings.expect_timeout_ms),
			recorder=self.recorder,
		)
		result = await evaluator.evaluate(request)
		return _text(result.to_json())

	async def dispatch(self, name: str, arguments: dict[str, Any] | None) -> list[types.TextContent]:
		handler = self._handlers.get(name)
		if handler is None:
			raise UnknownToolError(f'Unknown tool: {name}')
		async with self._call_lock:
			try:
				return await handler(arguments or {})
			except Exception:
				logger.error('tool failed: %s', name, exc_info=True)
				raise

	def _setup_handlers(self) -> None:
		@self.server.list_tools()
		async def handle_list_tools() -> list[types.Tool]:
			return list(TOOLS)

		# Exceptions raised here are reported by the SDK as an error result (isError=true).
		@self.server.call_tool()
		async def handle_call_tool(name: str, arguments: dict[str, Any] | None) -> list[types.TextContent]:
			return await self.dispatch(name, arguments)

	async def run(self) -> None:
		try:
			async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
				await self.server.run(
					read_stream,
					write_stream,
					InitializationOptions(
						server_name=SERVER_NAME,
						server_version=__version__,
						capabilities=self.server.get_capabilities(
							notification_options=NotificationOptions(),
							experimental_capabilities={},
						),
					),
				)
		finally:
			await self.runtime.close()


async def main() -> None:
	settings = Settings.from_env()
	configure_logging(settings.log_level)
	server = BrowserAssertMCPServer(settings)
	await server.run()


def cli() -> None:
	asyncio.run(main())


if __name__ == '__main__':
	cli()
