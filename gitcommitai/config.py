"""Configuration management for git-commit-ai."""
import logging
import os
import re
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

import tomli
import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .errors import ConfigError
from .models import ProviderType
from .prompts import DEFAULT_SYSTEM_PROMPT, DEFAULT_USER_PROMPT

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = ".gitcommitai.toml"
CONFIG_SECTION = "gitcommitai"

# (api key, base url, model) variables per provider, in default-provider order
PROVIDER_ENV: Dict[ProviderType, Tuple[str, str, str]] = {
    ProviderType.OPENAI: ("OPENAI_API_KEY", "OPENAI_BASE_URL", "OPENAI_MODEL"),
    ProviderType.AZURE: (
        "AZURE_OPENAI_API_KEY",
        "AZURE_OPENAI_ENDPOINT",
        "AZURE_OPENAI_DEPLOYMENT",
    ),
    ProviderType.DEEPSEEK: ("DEEPSEEK_API_KEY", "DEEPSEEK_BASE_URL", "DEEPSEEK_MODEL"),
    ProviderType.QWEN: ("QWEN_API_KEY", "QWEN_BASE_URL", "QWEN_MODEL"),
    ProviderType.ANTHROPIC: (
        "ANTHROPIC_API_KEY",
        "ANTHROPIC_BASE_URL",
        "ANTHROPIC_MODEL",
    ),
}

PROVIDER_EXTRA_ENV: Dict[ProviderType, Dict[str, str]] = {
    ProviderType.AZURE: {"AZURE_OPENAI_API_VERSION": "api_version"},
    ProviderType.ANTHROPIC: {"ANTHROPIC_VERSION": "anthropic_version"},
}


def _summarize(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or 'value'}: {err['msg']}"
        for err in error.errors()
    )


def parse_model_spec(spec: str) -> Tuple[ProviderType, Optional[str]]:
    """Split a ``provider`` or ``provider/model`` selector.

    Raises:
        ConfigError: If the provider is unknown or the model part is empty
    """
    provider, sep, model = spec.strip().partition("/")
    provider_type = ProviderType.parse(provider)
    if sep and not model:
        raise ConfigError(
            f"Model selector '{spec}' must be 'provider' or 'provider/model' (e.g. 'openai/gpt-4o')"
        )
    return provider_type, model or None


class ProviderConfig(BaseModel):
    """Settings for a single provider."""

    model_config = ConfigDict(frozen=True)

    api_key: str = ""
    base_url: Optional[str] = None
    default_model: Optional[str] = None
    extra: Dict[str, str] = Field(default_factory=dict)


class GatewayConfig(BaseModel):
    """Settings for every configured provider plus the default choice.

    ``max_retries`` is only consulted by the commit message generator, which
    retries timed-out requests; providers never retry on their own.
    """

    default_provider: ProviderType
    providers: Dict[ProviderType, ProviderConfig]
    timeout_seconds: float = Field(default=60.0, gt=0)
    max_retries: int = Field(default=0, ge=0)

    def __init__(self, **data):
        try:
            super().__init__(**data)
        except ValidationError as e:
            raise ConfigError(f"Invalid gateway configuration: {_summarize(e)}") from e

    @model_validator(mode="after")
    def _check_providers(self) -> "GatewayConfig":
        if not self.providers:
            raise ConfigError(
                "No providers configured. Please set at least one provider's API key."
            )
        if self.default_provider not in self.providers:
            raise ConfigError(
                f"Default provider '{self.default_provider.value}' is not configured"
            )
        return self

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GatewayConfig":
        """Build the configuration from environment variables.

        A provider is configured when its API key variable is set.
        ``LLM_MODEL`` (``provider`` or ``provider/model``) picks the default
        provider and overrides its model; ``LLM_PROVIDER`` picks the default
        provider only. Without either, the first configured provider wins.
        """
        env = os.environ if environ is None else environ

        providers: Dict[ProviderType, ProviderConfig] = {}
        for provider_type, (key_var, url_var, model_var) in PROVIDER_ENV.items():
            if key_var not in env:
                continue
            extra = {
                name: env[var]
                for var, name in PROVIDER_EXTRA_ENV.get(provider_type, {}).items()
                if var in env
            }
            providers[provider_type] = ProviderConfig(
                api_key=env[key_var],
                base_url=env.get(url_var),
                default_model=env.get(model_var),
                extra=extra,
            )

        default_provider: Optional[ProviderType] = None
        if env.get("LLM_MODEL"):
            default_provider, model = parse_model_spec(env["LLM_MODEL"])
            if model and default_provider in providers:
                providers[default_provider] = providers[default_provider].model_copy(
                    update={"default_model": model}
                )
        elif env.get("LLM_PROVIDER"):
            default_provider = ProviderType.parse(env["LLM_PROVIDER"])
        elif providers:
            default_provider = next(iter(providers))

        if default_provider is None:
            raise ConfigError(
                "No providers configured. Please set at least one provider's API key."
            )

        timeout = 60.0
        if env.get("LLM_TIMEOUT_SECONDS"):
            try:
                timeout = float(env["LLM_TIMEOUT_SECONDS"])
            except ValueError:
                raise ConfigError("Invalid timeout value")
            if timeout <= 0:
                raise ConfigError("Invalid timeout value")

        max_retries = 0
        if env.get("LLM_MAX_RETRIES"):
            try:
                max_retries = int(env["LLM_MAX_RETRIES"])
            except ValueError:
                raise ConfigError("Invalid max retries value")
            if max_retries < 0:
                raise ConfigError("Invalid max retries value")

        return cls(
            default_provider=default_provider,
            providers=providers,
            timeout_seconds=timeout,
            max_retries=max_retries,
        )


class Config(BaseModel):
    """Repository settings for git-commit-ai.

    These options can be set in the config file, through environment
    variables or on the command line. Provider secrets never live here,
    see GatewayConfig.from_env.
    """

    model: Optional[str] = Field(
        default=None,
        description="Provider or provider/model to use (e.g. openai, deepseek/deepseek-coder)"
    )

    system_prompt: str = Field(
        default=DEFAULT_SYSTEM_PROMPT,
        description="System prompt sent with every request"
    )

    user_prompt: str = Field(
        default=DEFAULT_USER_PROMPT,
        description="User prompt template; {{diff}} is replaced by the diff"
    )

    exclude: List[str] = Field(
        default_factory=list,
        description="Glob patterns of files left out of the diff"
    )

    max_tokens: int = Field(
        default=8192,
        ge=1,
        description="Maximum number of tokens for the generated message"
    )

    temperature: float = Field(
        default=0.7,
        ge=0,
        le=2,
        description="Sampling temperature (0.0 to 2.0)"
    )

    no_verify: bool = Field(
        default=False,
        description="Skip pre-commit hooks when committing"
    )

    always_log: bool = Field(
        default=False,
        description="Whether to always generate log files"
    )

    log_file: Optional[str] = Field(
        default=None,
        description="Path to log file (if not using automatic log file generation)"
    )

    @staticmethod
    def _is_safe_path(path: str) -> bool:
        """Check if a path is safe (no path traversal)."""
        if not path:
            return False

        if '..' in path or path.startswith('/') or '\\' in path:
            return False

        if os.path.isabs(path):
            return False

        return not re.match(r'^[A-Za-z]:', path)

    @classmethod
    def load(cls, repo_path: Path) -> 'Config':
        """Load configuration from the config file.

        Args:
            repo_path: Path to the git repository

        Returns:
            Config: Configuration object with values from file or defaults
        """
        config_path = repo_path / DEFAULT_CONFIG_FILENAME

        if not config_path.exists():
            return cls()

        try:
            with config_path.open('rb') as f:
                config_data = tomli.load(f)

            config_data = config_data.get(CONFIG_SECTION, config_data)

            if config_data.get('log_file') and not cls._is_safe_path(config_data['log_file']):
                logger.warning("Unsafe log file path '%s', using default", config_data['log_file'])
                config_data['log_file'] = None

            return cls(**config_data)
        except Exception as e:
            logger.warning("Error reading config file %s: %s", config_path, e)
            return cls()

    def save(self, repo_path: Path) -> None:
        """Save configuration to the config file.

        Args:
            repo_path: Path to the git repository
        """
        config_path = repo_path / DEFAULT_CONFIG_FILENAME
        config_dict = {k: v for k, v in self.model_dump().items() if v is not None}

        if config_dict.get('log_file') and not self._is_safe_path(config_dict['log_file']):
            logger.warning("Unsafe log file path '%s', not saving", config_dict['log_file'])
            del config_dict['log_file']

        with config_path.open('wb') as f:
            tomli_w.dump({CONFIG_SECTION: config_dict}, f)

    def get_log_file(self) -> Optional[Path]:
        """Get the path to the log file.

        If always_log is True, generates a timestamped log file name.
        Otherwise, returns the configured log_file path if set.

        Returns:
            Optional[Path]: Path to the log file, or None if logging is disabled
        """
        if self.always_log:
            timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
            return Path(f"gca_log-{timestamp}.log")
        elif self.log_file:
            if self._is_safe_path(self.log_file):
                return Path(self.log_file)
            logger.warning("Unsafe log file path '%s', logging disabled", self.log_file)
        return None

    def __init__(self, **data):
        """Initialize config with environment variable support."""
        env_data = {}

        env_mapping = {
            'GIT_COMMIT_AI_MODEL': 'model',
            'GIT_COMMIT_AI_SYSTEM_PROMPT': 'system_prompt',
            'GIT_COMMIT_AI_USER_PROMPT': 'user_prompt',
            'GIT_COMMIT_AI_EXCLUDE': 'exclude',
            'GIT_COMMIT_AI_MAX_TOKENS': 'max_tokens',
            'GIT_COMMIT_AI_TEMPERATURE': 'temperature',
            'GIT_COMMIT_AI_NO_VERIFY': 'no_verify',
            'GIT_COMMIT_AI_ALWAYS_LOG': 'always_log',
            'GIT_COMMIT_AI_LOG_FILE': 'log_file',
        }

        for env_var, field_name in env_mapping.items():
            if env_var in os.environ:
                value = os.environ[env_var]

                if field_name == 'exclude':
                    value = [p.strip() for p in value.split(',') if p.strip()]

                if field_name in ['no_verify', 'always_log']:
                    value = value.lower() in ['true', '1', 'yes', 'on']

                env_data[field_name] = value

        merged_data = {**env_data, **data}

        try:
            super().__init__(**merged_data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {_summarize(e)}") from e
