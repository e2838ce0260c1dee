"""Pydantic configuration models for web2markdown."""

import os
import re
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ..prompts import DEFAULT_SYSTEM_PROMPT

DEFAULT_ENDPOINT = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-4.1-nano"


def _expand_env_var(value: Optional[str]) -> Optional[str]:
    """Expand $VAR and ${VAR} references, leaving unset variables untouched."""
    if value is None:
        return None

    pattern = r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)"

    def replace(match: re.Match) -> str:
        var_name = match.group(1) or match.group(2)
        return os.environ.get(var_name, match.group(0))

    return re.sub(pattern, replace, value)


class ExtractionConfig(BaseModel):
    """Configuration for the extraction core."""

    include_images: bool = Field(True, description="Emit markdown images for <img> elements")
    content_selectors: Optional[list[str]] = Field(
        None,
        description="Main content selectors in priority order (replaces defaults)",
    )
    remove_selectors: list[str] = Field(
        default_factory=list,
        description="Additional boilerplate selectors to prune",
    )

    model_config = {"extra": "forbid"}


class RefineConfig(BaseModel):
    """Configuration for the LLM refine step.

    ``api_key`` supports environment variable expansion, e.g. '$OPENAI_API_KEY'.
    """

    enabled: bool = Field(True, description="Send extracted content to the LLM for refinement")
    model: str = Field(DEFAULT_MODEL, min_length=1, description="Chat completion model name")
    endpoint: str = Field(DEFAULT_ENDPOINT, description="OpenAI-compatible chat completions URL")
    api_key: Optional[str] = Field(None, description="Bearer token for the endpoint")
    system_prompt: str = Field(DEFAULT_SYSTEM_PROMPT, description="System prompt sent with every request")
    temperature: float = Field(0.3, ge=0, le=2, description="Sampling temperature")
    max_tokens: int = Field(4000, ge=1, description="Maximum tokens in the completion")
    timeout: float = Field(60.0, gt=0, description="Request timeout in seconds")
    max_retries: int = Field(2, ge=0, description="Retry attempts for transient failures")

    model_config = {"extra": "forbid"}

    @field_validator("endpoint")
    @classmethod
    def _check_endpoint(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"Endpoint must be an http(s) URL: {value}")
        return value

    def model_post_init(self, __context: object) -> None:
        """Expand environment variables in the API key."""
        if self.api_key:
            object.__setattr__(self, "api_key", _expand_env_var(self.api_key))


class DeliveryConfig(BaseModel):
    """Configuration for delivering the final markdown."""

    auto_copy: bool = Field(True, description="Copy the result to the clipboard")
    show_notifications: bool = Field(True, description="Print completion and error notices")
    append_page_info: bool = Field(False, description="Append a source link footer")
    output_file: Optional[Path] = Field(None, description="Also write the result to this file")

    model_config = {"extra": "forbid"}


class NetworkConfig(BaseModel):
    """Configuration for fetching pages."""

    proxy: Optional[str] = Field(None, description="HTTP/HTTPS proxy URL")
    user_agent: Optional[str] = Field(None, description="Custom User-Agent header")
    max_retries: int = Field(3, ge=0, description="Maximum retry attempts for failed requests")
    timeout: float = Field(30.0, gt=0, description="Page fetch timeout in seconds")

    model_config = {"extra": "forbid"}


class Web2MarkdownConfig(BaseModel):
    """
    Root configuration model.

    Example:
        config = Web2MarkdownConfig(
            extraction=ExtractionConfig(include_images=False),
            refine=RefineConfig(api_key="$OPENAI_API_KEY"),
        )

    YAML format:
        extraction:
          include_images: false
        refine:
          model: gpt-4.1-nano
          api_key: $OPENAI_API_KEY
        delivery:
          auto_copy: true
    """

    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    refine: RefineConfig = Field(default_factory=RefineConfig)
    delivery: DeliveryConfig = Field(default_factory=DeliveryConfig)
    network: NetworkConfig = Field(default_factory=NetworkConfig)

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field("INFO", description="Logging level")
    log_file: Optional[Path] = Field(None, description="Log file path")

    model_config = {"extra": "forbid"}

    def to_yaml(self) -> str:
        """Serialize config to YAML string."""
        import yaml

        return yaml.dump(self.model_dump(mode="json", exclude_none=True), default_flow_style=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "Web2MarkdownConfig":
        """Load config from YAML string."""
        import yaml

        data = yaml.safe_load(yaml_str) or {}
        return cls.model_validate(data)

    @classmethod
    def from_yaml_file(cls, path: Path) -> "Web2MarkdownConfig":
        """Load config from YAML file."""
        return cls.from_yaml(path.read_text())
