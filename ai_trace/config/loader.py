"""
Configuration management and loading.

Reads trace collector settings and extra model metadata from YAML.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml

from ai_trace.core.pricing import TextModelInfo
from ai_trace.providers.openai.info import MODEL_INFO_OPENAI

DEFAULT_MEMORY_LIMIT = 10


@dataclass(frozen=True)
class MemoryConfig:
    """Settings for memory retrieval."""
    limit: int = DEFAULT_MEMORY_LIMIT

    def __post_init__(self):
        """Validate the memory limit is positive."""
        if self.limit <= 0:
            raise ValueError("memory limit must be > 0")


@dataclass(frozen=True)
class TraceConfig:
    """Complete trace configuration."""
    endpoint: str
    headers: Dict[str, str]
    memory: MemoryConfig
    models: Tuple[TextModelInfo, ...] = ()

    def __post_init__(self):
        """Validate the endpoint is present."""
        if not self.endpoint or not self.endpoint.strip():
            raise ValueError("Trace endpoint is required")

    def model_registry(self) -> List[TextModelInfo]:
        """Configured models first, then the built-in OpenAI models."""
        return list(self.models) + list(MODEL_INFO_OPENAI)


def load_trace_config(path: str) -> TraceConfig:
    """Load and validate trace configuration from a YAML file.

    Strict validation ensures a misspelled key never silently falls back
    to a default.

    Args:
        path: Path to YAML configuration file

    Returns:
        Validated TraceConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Trace config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    if not raw_config:
        raise ValueError("Configuration file is empty")
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration must be a dictionary")

    allowed_top_keys = {'endpoint', 'headers', 'memory', 'models'}
    unknown_keys = set(raw_config.keys()) - allowed_top_keys
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    # Endpoint
    if 'endpoint' not in raw_config:
        raise ValueError("Missing required 'endpoint'")
    endpoint = raw_config['endpoint']
    if not isinstance(endpoint, str) or not endpoint.strip():
        raise ValueError("'endpoint' must be a non-empty string")

    # Headers
    headers_data = raw_config.get('headers') or {}
    if not isinstance(headers_data, dict):
        raise ValueError("'headers' must be a dictionary")
    headers = {}
    for name, value in headers_data.items():
        if not isinstance(value, (str, int, float)) or isinstance(value, bool):
            raise ValueError(f"Header '{name}' must be a string")
        headers[str(name)] = str(value)

    # Memory
    memory_data = raw_config.get('memory') or {}
    if not isinstance(memory_data, dict):
        raise ValueError("'memory' must be a dictionary")
    unknown_memory_keys = set(memory_data.keys()) - {'limit'}
    if unknown_memory_keys:
        raise ValueError(f"Unknown memory keys: {unknown_memory_keys}")
    limit = memory_data.get('limit', DEFAULT_MEMORY_LIMIT)
    if not isinstance(limit, int) or isinstance(limit, bool):
        raise ValueError("'memory.limit' must be an integer")
    memory = MemoryConfig(limit=limit)

    # Models
    models_data = raw_config.get('models') or []
    if not isinstance(models_data, list):
        raise ValueError("'models' must be a list")
    models = tuple(
        _parse_model_info(model_data, f"models[{i}]")
        for i, model_data in enumerate(models_data)
    )

    return TraceConfig(
        endpoint=endpoint.strip(),
        headers=headers,
        memory=memory,
        models=models
    )


def _parse_model_info(data: Dict, path: str) -> TextModelInfo:
    """Parse and validate a model metadata entry.

    Args:
        data: Model entry data
        path: Path for error messages

    Returns:
        Validated TextModelInfo

    Raises:
        ValueError: If the entry is invalid
    """
    if not isinstance(data, dict):
        raise ValueError(f"{path} must be a dictionary")

    allowed_keys = {
        'name', 'aliases', 'currency', 'character_is_token',
        'prompt_token_cost_per_1m', 'completion_token_cost_per_1m'
    }
    unknown_keys = set(data.keys()) - allowed_keys
    if unknown_keys:
        raise ValueError(f"Unknown keys in {path}: {unknown_keys}")

    name = data.get('name')
    if not isinstance(name, str) or not name.strip():
        raise ValueError(f"Missing required 'name' in {path}")

    aliases = data.get('aliases') or []
    if not isinstance(aliases, list) or not all(isinstance(a, str) for a in aliases):
        raise ValueError(f"'aliases' in {path} must be a list of strings")

    character_is_token = data.get('character_is_token', False)
    if not isinstance(character_is_token, bool):
        raise ValueError(f"'character_is_token' in {path} must be a boolean")

    return TextModelInfo(
        name=name.strip(),
        aliases=tuple(aliases),
        currency=data.get('currency'),
        character_is_token=character_is_token,
        prompt_token_cost_per_1m=_parse_cost(data, 'prompt_token_cost_per_1m', path),
        completion_token_cost_per_1m=_parse_cost(data, 'completion_token_cost_per_1m', path)
    )


def _parse_cost(data: Dict, key: str, path: str) -> Optional[float]:
    if key not in data:
        return None
    value = data[key]
    if not isinstance(value, (int, float)) or isinstance(value, bool) or value < 0:
        raise ValueError(f"'{key}' in {path} must be >= 0")
    return float(value)
