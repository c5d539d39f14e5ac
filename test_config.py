"""
Tests for settings, the prompt catalog and the section registry.
"""

import pytest

from briefeval.config import load_settings
from briefeval.errors import ConfigurationError, ValidationError
from briefeval.rubrics.catalog import UNVERSIONED, load_catalog
from briefeval.rubrics.registry import (
    SECTIONS,
    ScoringMode,
    SectionGroup,
    llm_sections,
    require_llm_section,
    sections_by_group,
    total_max_points,
)


# =============================================================================
# SETTINGS
# =============================================================================

def test_missing_api_key_is_fatal():
    with pytest.raises(ConfigurationError, match="API_KEY"):
        load_settings({})


def test_defaults():
    settings = load_settings({"BRIEFEVAL_LLM_API_KEY": "sk-test"})
    assert settings.model == "gpt-4o"
    assert settings.temperature == 0.3
    assert settings.max_tokens == 1000
    assert settings.timeout == 30.0
    assert settings.max_concurrency == 8
    assert settings.base_url is None
    assert settings.log_level == "INFO"


def test_openai_key_fallback_and_overrides():
    settings = load_settings({
        "OPENAI_API_KEY": "sk-fallback",
        "BRIEFEVAL_LLM_BASE_URL": "http://vllm.internal:8000/",
        "BRIEFEVAL_LLM_MODEL": "qwen3-30b",
        "BRIEFEVAL_MAX_CONCURRENCY": "3",
        "BRIEFEVAL_LOG_LEVEL": "debug",
    })
    assert settings.api_key == "sk-fallback"
    assert settings.base_url == "http://vllm.internal:8000/v1"
    assert settings.masked_base_url() == "http://vllm.internal:8000"
    assert settings.model == "qwen3-30b"
    assert settings.max_concurrency == 3
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize("env", [
    {"BRIEFEVAL_LLM_TIMEOUT": "soon"},
    {"BRIEFEVAL_LLM_MAX_TOKENS": "1e3"},
    {"BRIEFEVAL_MAX_CONCURRENCY": "0"},
])
def test_invalid_numbers(env):
    with pytest.raises(ConfigurationError):
        load_settings({"BRIEFEVAL_LLM_API_KEY": "sk-test", **env})


# =============================================================================
# PROMPT CATALOG
# =============================================================================

def test_packaged_catalog():
    catalog = load_catalog()
    assert catalog.version == "2025.09-r3"
    assert set(catalog.prompts) == {s.id for s in llm_sections()}
    assert "evaluate_section" in catalog.prompt_for("hypothesis")
    assert "duration" not in catalog


def test_catalog_from_directory(tmp_path):
    (tmp_path / "audience.txt").write_text("Score the audience definition.", encoding="utf-8")
    catalog = load_catalog(tmp_path, sections=[SECTIONS["audience"]])
    assert catalog.version == UNVERSIONED
    assert catalog.prompt_for("audience") == "Score the audience definition."


def test_catalog_missing_prompt(tmp_path):
    with pytest.raises(ConfigurationError, match="hypothesis"):
        load_catalog(tmp_path, sections=[SECTIONS["hypothesis"]])


def test_catalog_empty_prompt(tmp_path):
    (tmp_path / "audience.txt").write_text("  \n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="empty"):
        load_catalog(tmp_path, sections=[SECTIONS["audience"]])


# =============================================================================
# REGISTRY
# =============================================================================

def test_registry_shape():
    assert len(SECTIONS) == 19
    assert total_max_points() == 88
    assert list(SECTIONS)[:3] == ["outcome", "trunkProblem", "branchProblem"]
    assert len(sections_by_group(SectionGroup.PROBLEM_SPACE)) == 6


def test_rubric_criteria_sum_to_max_points():
    for section in SECTIONS.values():
        if section.scoring_mode == ScoringMode.LLM_RUBRIC_NPT:
            assert sum(c.points for c in section.criteria) == section.max_points


def test_header_variants_are_unique_and_lowercase():
    seen = {}
    for section in SECTIONS.values():
        for variant in section.header_variants:
            assert variant == variant.lower()
            assert variant not in seen, f"{variant} used by {seen.get(variant)} and {section.id}"
            seen[variant] = section.id


def test_require_llm_section():
    assert require_llm_section("prediction").id == "prediction"
    for bad in (None, "", "outcome", "whatNext", "nope"):
        with pytest.raises(ValidationError, match="Invalid section type"):
            require_llm_section(bad)
