"""PRISM configuration.

Typed configuration for the analyzer and its optional AI provider. All
settings use Pydantic v2 models so they can be validated at construction
time and serialised to/from JSON or environment variables without
boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError

from prism.errors import ConfigurationError

Provider = Literal["none", "ollama", "openai"]

_PROVIDER_DEFAULTS: dict[str, tuple[str, str]] = {
    "ollama": ("http://localhost:11434", "llama3.1:latest"),
    "openai": ("https://api.openai.com/v1", "gpt-4o-mini"),
}


class LlmConfig(BaseModel):
    """Connection settings for the completion provider."""

    provider: Provider = Field(default="none", description="'none' disables AI augmentation")
    model: str = Field(default="")
    api_key: str | None = Field(default=None, repr=False)
    base_url: str | None = Field(default=None, description="Provider root URL")
    timeout: int = Field(default=30, ge=1, description="Per-request timeout in seconds")

    @property
    def is_configured(self) -> bool:
        """Whether enough is set to call the provider.

        Ollama runs locally and needs no API key.
        """
        if self.provider == "none" or not self.model:
            return False
        return self.provider == "ollama" or bool(self.api_key)

    @property
    def resolved_base_url(self) -> str:
        if self.base_url:
            return self.base_url.rstrip("/")
        return _PROVIDER_DEFAULTS.get(self.provider, ("", ""))[0]

    def with_provider(self, provider: Provider) -> "LlmConfig":
        """Return a copy switched to *provider*, filling in its default model."""
        update: dict[str, Any] = {"provider": provider}
        if provider in _PROVIDER_DEFAULTS and not self.model:
            update["model"] = _PROVIDER_DEFAULTS[provider][1]
        if provider == "none":
            update["base_url"] = None
        return self.model_copy(update=update)


class AnalysisConfig(BaseModel):
    """Tuning knobs for the rule-based analysis."""

    ambiguity_threshold: float = Field(
        default=0.7, ge=0.0, le=1.0,
        description="Detection passes with a lower confidence are skipped",
    )
    custom_terms: list[str] = Field(
        default_factory=list, description="Extra vague terms to flag"
    )
    max_concurrency: int = Field(default=4, ge=1, description="Parallel analyses in batch mode")
    pseudocode_style: str = Field(default="generic")


class Config(BaseModel):
    """Global PRISM configuration.

    Instances are typically created once by the CLI entry point and then
    passed to the pipeline and batch runner.
    """

    llm: LlmConfig = Field(default_factory=LlmConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    @staticmethod
    def default_path() -> Path:
        """``~/.prism/config.json``."""
        return Path.home() / ".prism" / "config.json"

    def save(self, path: Path | None = None) -> Path:
        """Persist the configuration to a JSON file.

        Args:
            path: Destination file. Defaults to :meth:`default_path`.

        Returns:
            The resolved path where the file was written.
        """
        target = Path(path) if path else self.default_path()
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """Load a previously-saved configuration from JSON.

        A missing file at the default location yields the defaults; an
        explicit path must exist.

        Raises:
            ConfigurationError: If the file is missing or invalid.
        """
        target = Path(path) if path else cls.default_path()
        if not target.exists():
            if path is None:
                return cls()
            raise ConfigurationError(f"Config file not found: {target}")
        try:
            return cls.model_validate_json(target.read_text(encoding="utf-8"))
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid config file {target}: {exc}") from exc

    @classmethod
    def from_env(cls, base: "Config | None" = None) -> "Config":
        """Apply ``PRISM_*`` environment variables on top of *base*.

        Recognised variables (all optional):
            PRISM_PROVIDER, PRISM_MODEL, PRISM_API_KEY, PRISM_BASE_URL,
            PRISM_TIMEOUT, PRISM_AMBIGUITY_THRESHOLD, PRISM_CUSTOM_TERMS,
            PRISM_MAX_CONCURRENCY, PRISM_PSEUDOCODE_STYLE.

        Raises:
            ConfigurationError: If a variable holds an invalid value.
        """
        base = base or cls()
        llm_kwargs: dict[str, Any] = {}
        analysis_kwargs: dict[str, Any] = {}
        try:
            if os.environ.get("PRISM_PROVIDER"):
                llm_kwargs["provider"] = os.environ["PRISM_PROVIDER"].strip().lower()
            if os.environ.get("PRISM_MODEL"):
                llm_kwargs["model"] = os.environ["PRISM_MODEL"]
            if os.environ.get("PRISM_API_KEY"):
                llm_kwargs["api_key"] = os.environ["PRISM_API_KEY"]
            if os.environ.get("PRISM_BASE_URL"):
                llm_kwargs["base_url"] = os.environ["PRISM_BASE_URL"]
            if os.environ.get("PRISM_TIMEOUT"):
                llm_kwargs["timeout"] = int(os.environ["PRISM_TIMEOUT"])

            if os.environ.get("PRISM_AMBIGUITY_THRESHOLD"):
                analysis_kwargs["ambiguity_threshold"] = float(os.environ["PRISM_AMBIGUITY_THRESHOLD"])
            if os.environ.get("PRISM_CUSTOM_TERMS"):
                analysis_kwargs["custom_terms"] = [
                    t.strip() for t in os.environ["PRISM_CUSTOM_TERMS"].split(",") if t.strip()
                ]
            if os.environ.get("PRISM_MAX_CONCURRENCY"):
                analysis_kwargs["max_concurrency"] = int(os.environ["PRISM_MAX_CONCURRENCY"])
            if os.environ.get("PRISM_PSEUDOCODE_STYLE"):
                analysis_kwargs["pseudocode_style"] = os.environ["PRISM_PSEUDOCODE_STYLE"]

            return cls(
                llm=LlmConfig(**{**base.llm.model_dump(), **llm_kwargs}),
                analysis=AnalysisConfig(**{**base.analysis.model_dump(), **analysis_kwargs}),
            )
        except ValueError as exc:
            raise ConfigurationError(f"Invalid PRISM_* environment value: {exc}") from exc
