import os
from typing import Union

from .errors import ValidationError
from .types import ClientConfig

# suffix -> (ClientConfig field, converter)
_FIELDS = {
    "API_KEY": ("api_key", str),
    "BASE_URL": ("base_url", str),
    "TIMEOUT": ("timeout", float),
    "MAX_RETRIES": ("max_retries", int),
    "RETRY_DELAY": ("retry_delay", float),
    "CACHE_TTL": ("cache_ttl", float),
}


def _parse_env_file(env_path: str) -> dict[str, str]:
    """Parse a simple .env file into a dict without modifying os.environ.

    Supports basic KEY=VALUE pairs, ignoring comments and blank lines.
    Surrounding single/double quotes are stripped if present.
    An ``export`` prefix is accepted.
    """
    values: dict[str, str] = {}
    try:
        with open(env_path) as f:
            for raw_line in f:
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, val = line.split("=", 1)
                key = key.strip()
                if key.startswith("export "):
                    key = key[len("export ") :].strip()
                val = val.strip().strip('"').strip("'")
                if key:
                    values[key] = val
    except FileNotFoundError:
        pass
    return values


def load_config_from_env(
    prefix: str = "TUTELIQ_",
    env_path: Union[str, None] = None,
    **overrides,
) -> ClientConfig:
    """Create a ClientConfig from environment variables.

    Reads ``{prefix}API_KEY``, ``BASE_URL``, ``TIMEOUT``, ``MAX_RETRIES``,
    ``RETRY_DELAY`` and ``CACHE_TTL``. If 'env_path' is provided, variables from
    the .env file augment the lookup; values in the actual environment take
    precedence over the file. Keyword overrides (e.g. ``transport=``) win over both.

    Raises:
        ValidationError: on malformed numbers or an invalid resulting config
    """
    file_env = _parse_env_file(env_path) if env_path else {}
    env_map: dict[str, str] = {**file_env, **os.environ}

    kwargs = {}
    for suffix, (field_name, convert) in _FIELDS.items():
        name = f"{prefix}{suffix}"
        raw = env_map.get(name)
        if raw is None or raw.strip() == "":
            continue
        try:
            kwargs[field_name] = convert(raw.strip())
        except ValueError as e:
            raise ValidationError(f"{name} must be a number, got {raw!r}") from e
    kwargs.update(overrides)
    kwargs.setdefault("api_key", "")
    return ClientConfig(**kwargs)
