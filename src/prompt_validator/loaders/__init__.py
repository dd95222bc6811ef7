"""File and resource loading utilities.

Key modules:
    - prompt_specs: Scripted prompt sequences from YAML/JSON
    - prompts: Bundled prompt templates
"""

from .prompt_specs import load_prompt_specs, parse_prompt_specs
from .prompts import load_prompt

__all__ = [
    "load_prompt_specs",
    "parse_prompt_specs",
    "load_prompt",
]
