"""Load Markdown prompt templates with YAML front matter and render them with Jinja2."""

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Tuple

import yaml
from jinja2 import BaseLoader, Environment, StrictUndefined, Template

logger = logging.getLogger(__name__)

PROMPTS_DIR = Path(__file__).parent

_ENV = Environment(loader=BaseLoader(), undefined=StrictUndefined)


@dataclass(frozen=True)
class PromptTemplate:
    id: str
    template: Template
    version: str = "v1"
    description: str = ""
    requires: List[str] = field(default_factory=list)

    def render(self, **kwargs) -> str:
        missing = [name for name in self.requires if kwargs.get(name) is None]
        if missing:
            raise ValueError(f"Prompt '{self.id}' missing required vars: {missing}")
        return self.template.render(**kwargs).strip()


def get_prompt_path(prompt_id: str) -> Path:
    return PROMPTS_DIR / f"{prompt_id}.md"


def available_prompts() -> List[str]:
    return sorted(path.stem for path in PROMPTS_DIR.glob("*.md"))


@lru_cache(maxsize=32)
def _load_prompt_file(prompt_id: str) -> PromptTemplate:
    path = get_prompt_path(prompt_id)
    if not path.exists():
        raise FileNotFoundError(f"Prompt file not found: {path}")

    metadata, body = _split_front_matter(path.read_text(encoding="utf-8"))
    logger.debug(f"Loaded prompt {prompt_id} ({metadata.get('version', 'v1')})")
    return PromptTemplate(
        id=prompt_id,
        template=_ENV.from_string(body),
        version=str(metadata.get("version", "v1")),
        description=metadata.get("description", ""),
        requires=list(metadata.get("requires") or []),
    )


def _split_front_matter(content: str) -> Tuple[Dict[str, Any], str]:
    if not content.startswith("---"):
        return {}, content

    _, header, body = (content.split("---", 2) + ["", ""])[:3]
    try:
        metadata = yaml.safe_load(header) or {}
    except yaml.YAMLError:
        logger.warning("Failed to parse YAML front matter")
        metadata = {}
    return metadata, body.strip()


def load_prompt(prompt_id: str, **kwargs) -> str:
    return _load_prompt_file(prompt_id).render(**kwargs)


def reload_prompts() -> None:
    _load_prompt_file.cache_clear()
