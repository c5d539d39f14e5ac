# briefeval/rubrics/catalog.py
"""
Rubric prompt catalog.

Prompts are plain-text data files (one ``<section_id>.txt`` per LLM-judged
section) plus a ``VERSION`` file with the catalog revision tag. The catalog is
loaded once at startup and is read-only afterwards; changing rubric wording
is a data change, and every report records which revision scored it.
"""

from __future__ import annotations

from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Union

from briefeval.errors import ConfigurationError
from briefeval.rubrics.registry import SectionDefinition, llm_sections


UNVERSIONED = "unversioned"


@dataclass(frozen=True)
class PromptCatalog:
    version: str
    prompts: Mapping[str, str]

    def prompt_for(self, section_id: str) -> Optional[str]:
        return self.prompts.get(section_id)

    def __contains__(self, section_id: object) -> bool:
        return section_id in self.prompts


def _default_dir():
    return resources.files("briefeval").joinpath("prompts")


def load_catalog(
    directory: Optional[Union[str, Path]] = None,
    *,
    sections: Optional[Iterable[SectionDefinition]] = None,
) -> PromptCatalog:
    """
    Read the prompt for every LLM-judged section.

    Args:
        directory: prompt directory; defaults to the packaged prompts
        sections: sections that need a prompt; defaults to all LLM sections

    Raises:
        ConfigurationError: a required prompt file is missing or empty
    """
    root = Path(directory) if directory else _default_dir()
    wanted = list(sections) if sections is not None else llm_sections()

    prompts = {}
    for section in wanted:
        path = root.joinpath(f"{section.id}.txt")
        if not path.is_file():
            raise ConfigurationError(f"No rubric prompt for section '{section.id}' in {root}")
        text = path.read_text(encoding="utf-8").strip()
        if not text:
            raise ConfigurationError(f"Rubric prompt for section '{section.id}' is empty")
        prompts[section.id] = text

    version_file = root.joinpath("VERSION")
    version = version_file.read_text(encoding="utf-8").strip() if version_file.is_file() else ""

    return PromptCatalog(version=version or UNVERSIONED, prompts=MappingProxyType(prompts))
