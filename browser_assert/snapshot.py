from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from browser_assert.errors import RefResolutionError

REF_ATTRIBUTE = 'data-assert-ref'

# Walks rendered elements in document order, tags each with its ref and drops tags left by
# older snapshots so only the most recent refs resolve.
_CAPTURE_SCRIPT = r"""
(args) => {
	const [snapshotId, attr] = args;
	const skip = new Set(['HEAD', 'SCRIPT', 'STYLE', 'NOSCRIPT', 'TEMPLATE', 'META', 'LINK', 'TITLE']);
	document.querySelectorAll(`[${attr}]`).forEach((el) => el.removeAttribute(attr));
	const entries = [];
	let counter = 0;
	const walk = (el, depth) => {
		if (skip.has(el.tagName)) return;
		counter += 1;
		const ref = `s${snapshotId}e${counter}`;
		el.setAttribute(attr, ref);
		const text = Array.from(el.childNodes)
			.filter((n) => n.nodeType === Node.TEXT_NODE)
			.map((n) => n.textContent.trim())
			.filter(Boolean)
			.join(' ');
		entries.push({
			ref,
			depth,
			tag: el.tagName.toLowerCase(),
			role: el.getAttribute('role') || '',
			text: text.slice(0, 100),
		});
		for (const child of Array.from(el.children)) walk(child, depth + 1);
	};
	if (document.documentElement) walk(document.documentElement, 0);
	return entries;
}
"""


@dataclass(frozen=True)
class SnapshotEntry:
	ref: str
	depth: int
	tag: str
	role: str = ''
	text: str = ''

	def render(self) -> str:
		label = self.role or self.tag
		line = f'{"  " * self.depth}- {label}'
		if self.text:
			line += f' {json.dumps(self.text, ensure_ascii=False)}'
		return f'{line} [ref={self.ref}]'


@dataclass(frozen=True)
class PageSnapshot:
	snapshot_id: int
	entries: tuple[SnapshotEntry, ...]

	@property
	def refs(self) -> frozenset[str]:
		return frozenset(e.ref for e in self.entries)

	def render(self) -> str:
		return '\n'.join(e.render() for e in self.entries)

	def ref_locator(self, page: Any, ref: str) -> Any:
		if ref not in self.refs:
			raise RefResolutionError(f'Ref {ref} not found in the current page snapshot. Try capturing new snapshot.')
		return page.locator(f'[{REF_ATTRIBUTE}="{ref}"]')


def _coerce_entry(raw: Any) -> SnapshotEntry | None:
	if not isinstance(raw, dict):
		return None
	ref = str(raw.get('ref') or '').strip()
	if not ref:
		return None
	try:
		depth = int(raw.get('depth') or 0)
	except Exception:
		depth = 0
	return SnapshotEntry(
		ref=ref,
		depth=depth,
		tag=str(raw.get('tag') or ''),
		role=str(raw.get('role') or ''),
		text=str(raw.get('text') or ''),
	)


async def capture_snapshot(page: Any, snapshot_id: int) -> PageSnapshot:
	raw = await page.evaluate(_CAPTURE_SCRIPT, [snapshot_id, REF_ATTRIBUTE])
	entries = [e for e in (_coerce_entry(r) for r in (raw or [])) if e is not None]
	return PageSnapshot(snapshot_id=snapshot_id, entries=tuple(entries))
