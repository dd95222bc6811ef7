"""
Prompt specification loading.

Reads scripted prompt sequences from YAML or JSON test-data files.
A file holds either a list of prompt objects or a mapping with a
``prompts`` list.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from prompt_validator.models.prompt_spec import PromptSpec


def parse_prompt_specs(data: Any, source: str = "<data>") -> list[PromptSpec]:
	"""
	Validate already-decoded prompt data.

	Parameters:
		data: A list of prompt mappings, or a mapping with ``prompts``.
		source: Label used in error messages.

	Returns:
		PromptSpecs in file order.

	Raises:
		ValueError: If the structure or any entry is invalid.
	"""
	if isinstance(data, dict):
		data = data.get("prompts")
	if not isinstance(data, list):
		raise ValueError(f"{source}: expected a list of prompts")
	specs: list[PromptSpec] = []
	for idx, item in enumerate(data):
		if isinstance(item, str):
			item = {"text": item}
		try:
			specs.append(PromptSpec.model_validate(item))
		except ValidationError as exc:
			raise ValueError(f"{source}: prompt {idx} is invalid: {exc}") from exc
	return specs


def load_prompt_specs(path: str | Path) -> list[PromptSpec]:
	"""Load PromptSpecs from a YAML or JSON file."""
	p = Path(path)
	try:
		data = yaml.safe_load(p.read_text(encoding="utf-8"))
	except yaml.YAMLError as exc:
		raise ValueError(f"{p}: not valid YAML/JSON: {exc}") from exc
	return parse_prompt_specs(data, source=str(p))


__all__ = ["load_prompt_specs", "parse_prompt_specs"]
