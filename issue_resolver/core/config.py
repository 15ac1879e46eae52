"""Central configuration management for the issue resolver"""

import os
from dataclasses import dataclass
from typing import Dict, Optional, List
from pathlib import Path
import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache


class GitHubConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="GITHUB_", env_file=".env", extra="ignore")

    token: str = ""
    owner: str = ""
    repo: str = ""
    api_url: str = "https://api.github.com"
    timeout: float = 30.0


@dataclass(frozen=True)
class ProviderSettings:
    """Explicit description of one provider adapter to construct"""
    provider_id: str
    api_key: str = ""
    base_url: Optional[str] = None
    timeout: float = 120.0


class LLMConfig(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Credentials; an empty value leaves that provider out
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    local_llm_url: Optional[str] = None

    # Primary model handed to tasks when nothing else was resolved
    default_model: str = "claude-3-5-sonnet-20241022"
    # Retried once when a task fails on its first model
    fallback_model: Optional[str] = "gpt-4o-mini"
    # Returned by the selector when every candidate was filtered out
    safe_default_model: str = "gpt-4o-mini"

    request_timeout: float = Field(default=120.0, description="Provider request timeout in seconds")

    # Task-specific model preferences
    task_preferences: Dict[str, str] = Field(default_factory=lambda: {
        "analyze-issue": "claude-3-5-sonnet-20241022",
        "bug-fix": "gpt-4o",
        "feature-implementation": "claude-3-5-sonnet-20241022",
        "documentation-update": "gpt-4o-mini",
        "security-scan": "gpt-4o",
        "test-generation": "claude-3-haiku-20240307",
        "refactor": "claude-3-5-sonnet-20241022",
        "triage-issues": "gpt-4o-mini",
    })

    def provider_settings(self) -> List[ProviderSettings]:
        """Providers whose credentials are present, in registration order"""
        providers = []
        if self.openai_api_key:
            providers.append(ProviderSettings(
                provider_id="openai",
                api_key=self.openai_api_key,
                timeout=self.request_timeout
            ))
        if self.anthropic_api_key:
            providers.append(ProviderSettings(
                provider_id="anthropic",
                api_key=self.anthropic_api_key,
                timeout=self.request_timeout
            ))
        if self.local_llm_url:
            providers.append(ProviderSettings(
                provider_id="local",
                base_url=self.local_llm_url,
                timeout=self.request_timeout
            ))
        return providers


class LimitsConfig(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    max_daily_cost: float = 10.0
    max_tokens_per_request: int = 8000


class TelemetryConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="TELEMETRY_", env_file=".env", extra="ignore")

    enabled: bool = False
    service_name: str = "issue-resolver"
    otlp_endpoint: str = "http://localhost:4317"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore"
    )

    app_name: str = "GitHub Issue Resolver"
    app_version: str = "1.0.0"
    environment: str = "development"

    github: GitHubConfig = Field(default_factory=GitHubConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    limits: LimitsConfig = Field(default_factory=LimitsConfig)
    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)

    @classmethod
    def load_from_yaml(cls, yaml_path: Optional[str] = None) -> "Settings":
        """Load settings from YAML file with environment overrides"""
        if yaml_path and Path(yaml_path).exists():
            with open(yaml_path, 'r') as f:
                config_data = yaml.safe_load(f) or {}
                return cls(**config_data)
        return cls()


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    yaml_path = os.getenv("CONFIG_PATH", "./config/settings.yaml")
    return Settings.load_from_yaml(yaml_path)
