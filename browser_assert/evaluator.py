from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Mapping, Protocol

from browser_assert.envvars import expand_env_vars
from browser_assert.errors import PreconditionError
from browser_assert.recording import Recorder, contain_text_entry
from browser_assert.text_match import MatchOutcome, TextMatchEngine, TimeoutPolicy

AGAINST_ELEMENT = 'element'
AGAINST_PAGE = 'page'
PASS = 'PASS'
FAIL = 'FAIL'


@dataclass(frozen=True)
class AssertionRequest:
	against: str
	expected: str
	ref: str | None = None
	element: str | None = None


@dataclass(frozen=True)
class RequestValidation:
	request: AssertionRequest | None = None
	reason: str | None = None

	@property
	def ok(self) -> bool:
		return self.request is not None


@dataclass(frozen=True)
class AssertionResult:
	result: str
	against: str
	error: str | None = None

	@property
	def passed(self) -> bool:
		return self.result == PASS

	def to_dict(self) -> dict[str, str]:
		out = {'result': self.result, 'against': self.against}
		if self.error is not None:
			out['error'] = self.error
		return out

	def to_json(self) -> str:
		return json.dumps(self.to_dict(), ensure_ascii=False, separators=(',', ':'))


@dataclass(frozen=True)
class ResolvedTarget:
	locator: Any
	selector: str


class TargetResolver(Protocol):
	def resolve_by_ref(self, ref: str) -> ResolvedTarget: ...

	def resolve_document_root(self) -> ResolvedTarget: ...


class TextMatcher(Protocol):
	async def await_contains_text(self, locator: Any, text: str, policy: TimeoutPolicy) -> MatchOutcome: ...


def _optional_str(args: Mapping[str, Any], key: str) -> tuple[str | None, str | None]:
	val = args.get(key)
	if val is None:
		return None, None
	if not isinstance(val, str):
		return None, f'{key} must be a string'
	return val, None


def validate_request(args: Any) -> RequestValidation:
	"""Shape-check raw tool arguments into an :class:`AssertionRequest`.

	Never raises; the caller decides that an invalid request is fatal.
	"""
	if not isinstance(args, Mapping):
		return RequestValidation(reason='arguments must be an object')

	against = args.get('against')
	if against not in (AGAINST_ELEMENT, AGAINST_PAGE):
		return RequestValidation(reason=f'against must be one of "element" or "page", got {against!r}')

	expected = args.get('expected')
	if not isinstance(expected, str):
		return RequestValidation(reason='expected must be a string')

	ref, err = _optional_str(args, 'ref')
	if err:
		return RequestValidation(reason=err)
	element, err = _optional_str(args, 'element')
	if err:
		return RequestValidation(reason=err)

	if against == AGAINST_ELEMENT and ref is None:
		return RequestValidation(reason='ref is required when asserting against an element')

	return RequestValidation(request=AssertionRequest(against=against, expected=expected, ref=ref, element=element))


def parse_request(args: Any) -> AssertionRequest:
	"""Like :func:`validate_request`, but an invalid request raises :class:`PreconditionError`."""
	validation = validate_request(args)
	if validation.request is None:
		raise PreconditionError(validation.reason or 'invalid arguments')
	return validation.request


class AssertionEvaluator:
	"""Runs one contain-text check and reports it as PASS or FAIL.

	Precondition and target-resolution problems raise (``ToolError`` subclasses); a text
	mismatch is an ordinary :class:`AssertionResult` with ``result == 'FAIL'``.
	"""

	def __init__(
		self,
		*,
		resolver: TargetResolver,
		matcher: TextMatcher | None = None,
		environ: Mapping[str, str] | None = None,
		policy: TimeoutPolicy | None = None,
		recorder: Recorder | None = None,
	) -> None:
		self.resolver = resolver
		self.matcher = matcher or TextMatchEngine()
		self.environ = dict(environ or {})
		self.policy = policy or TimeoutPolicy()
		self.recorder = recorder or Recorder()

	async def evaluate_args(self, args: Any) -> AssertionResult:
		return await self.evaluate(parse_request(args))

	async def evaluate(self, request: AssertionRequest) -> AssertionResult:
		if request.against == AGAINST_PAGE:
			target = self.resolver.resolve_document_root()
		elif request.ref is None:
			raise PreconditionError('ref is required when asserting against an element')
		else:
			target = self.resolver.resolve_by_ref(request.ref)

		expected = expand_env_vars(request.expected, self.environ)

		# Recorded statements keep placeholders unexpanded.
		self.recorder.emit(
			contain_text_entry(
				against=request.against,
				selector=target.selector,
				expected=request.expected,
				element=request.element,
			)
		)

		outcome = await self.matcher.await_contains_text(target.locator, expected, self.policy)
		if outcome.matched:
			return AssertionResult(result=PASS, against=request.against)
		error = outcome.diagnostic or f'Expected text {expected!r} not found'
		return AssertionResult(result=FAIL, against=request.against, error=error)
