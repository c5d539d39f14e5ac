# briefeval/config.py
"""
Environment-driven settings.

Values are read once at startup (after ``load_dotenv()`` in the app). A missing
provider credential is a ConfigurationError: the service must not come up
without one.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from briefeval.errors import ConfigurationError


DEFAULT_MODEL = "gpt-4o"
LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


@dataclass(frozen=True)
class Settings:
    api_key: str
    base_url: Optional[str]
    model: str = DEFAULT_MODEL
    temperature: float = 0.3
    max_tokens: int = 1000
    timeout: float = 30.0
    max_concurrency: int = 8
    prompts_dir: Optional[str] = None
    log_level: str = "INFO"

    def masked_base_url(self) -> Optional[str]:
        if not self.base_url:
            return None
        from urllib.parse import urlparse
        parsed = urlparse(self.base_url)
        return f"{parsed.scheme}://{parsed.netloc}"


def _number(env: Mapping[str, str], key: str, default, cast):
    raw = env.get(key, "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be a {cast.__name__}, got {raw!r}")


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from the environment.

    Raises:
        ConfigurationError: no API key, or a numeric setting that does not parse
    """
    env = os.environ if environ is None else environ

    api_key = (env.get("BRIEFEVAL_LLM_API_KEY") or env.get("OPENAI_API_KEY") or "").strip()
    if not api_key:
        raise ConfigurationError(
            "BRIEFEVAL_LLM_API_KEY (or OPENAI_API_KEY) is not set in environment variables"
        )

    # OpenAI-compatible servers expect the /v1 prefix
    base_url = env.get("BRIEFEVAL_LLM_BASE_URL", "").strip().rstrip("/")
    if base_url and not base_url.endswith("/v1"):
        base_url = f"{base_url}/v1"

    max_concurrency = _number(env, "BRIEFEVAL_MAX_CONCURRENCY", 8, int)
    if max_concurrency < 1:
        raise ConfigurationError("BRIEFEVAL_MAX_CONCURRENCY must be at least 1")

    return Settings(
        api_key=api_key,
        base_url=base_url or None,
        model=env.get("BRIEFEVAL_LLM_MODEL", "").strip() or DEFAULT_MODEL,
        temperature=_number(env, "BRIEFEVAL_LLM_TEMPERATURE", 0.3, float),
        max_tokens=_number(env, "BRIEFEVAL_LLM_MAX_TOKENS", 1000, int),
        timeout=_number(env, "BRIEFEVAL_LLM_TIMEOUT", 30.0, float),
        max_concurrency=max_concurrency,
        prompts_dir=env.get("BRIEFEVAL_PROMPTS_DIR", "").strip() or None,
        log_level=env.get("BRIEFEVAL_LOG_LEVEL", "INFO").strip().upper() or "INFO",
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)
