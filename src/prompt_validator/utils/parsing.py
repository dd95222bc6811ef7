"""
JSON extraction utilities.

Model replies wrap JSON in prose and code fences; these helpers pull
the payload out so it can be validated into a pydantic model.
"""

from __future__ import annotations

import json
import re
from typing import Any, Optional

ANY_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.S)


def _last_fenced_block(text: str) -> Optional[str]:
	matches = list(ANY_FENCE_RE.finditer(text))
	if not matches:
		return None
	return matches[-1].group(1).strip()


def _first_balanced_object(text: str) -> Optional[str]:
	"""Return the first brace-balanced ``{...}`` span, ignoring braces in strings."""
	depth = 0
	start = None
	in_string = False
	escaped = False
	for i, ch in enumerate(text):
		if in_string:
			if escaped:
				escaped = False
			elif ch == "\\":
				escaped = True
			elif ch == '"':
				in_string = False
			continue
		if ch == '"' and depth > 0:
			in_string = True
		elif ch == "{":
			if depth == 0:
				start = i
			depth += 1
		elif ch == "}" and depth > 0:
			depth -= 1
			if depth == 0 and start is not None:
				return text[start:i + 1]
	return None


def extract_json(text: str | None) -> Optional[Any]:
	"""
	Extract JSON from the last fenced block, or the first balanced object.

	Parameters:
		text: Model output containing JSON.

	Returns:
		Parsed JSON value, or None if nothing parses.
	"""
	if not text:
		return None
	candidates = []
	fenced = _last_fenced_block(text)
	if fenced:
		candidates.append(fenced)
	balanced = _first_balanced_object(text)
	if balanced:
		candidates.append(balanced)
	candidates.append(text.strip())
	for cand in candidates:
		try:
			return json.loads(cand)
		except (json.JSONDecodeError, TypeError):
			continue
	return None


def coerce_json(value: Any) -> Any:
	"""Decode a JSON string payload; return anything else unchanged."""
	if isinstance(value, str):
		stripped = value.strip()
		if stripped[:1] in ("{", "["):
			try:
				return json.loads(stripped)
			except json.JSONDecodeError:
				return value
	return value


__all__ = ["extract_json", "coerce_json"]
