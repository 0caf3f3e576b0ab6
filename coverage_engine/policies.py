import logging
import os

from . import settings
from .schemas import PolicyConfig

logger = logging.getLogger(__name__)


def _env_overrides(profile: str) -> dict[str, str]:
    """Collects POLICY_<PROFILE>_<FIELD> variables for the given profile."""
    overrides = {}
    for field in PolicyConfig.model_fields:
        value = os.getenv(f"POLICY_{profile.upper()}_{field.upper()}")
        if value is not None:
            overrides[field] = value
    return overrides


def get_policy(name: str = "default", **overrides) -> PolicyConfig:
    """
    Builds the PolicyConfig for a named profile.

    Precedence, lowest first: profile defaults, environment overrides,
    keyword overrides. Unknown profile names raise KeyError; invalid values
    raise pydantic's ValidationError.
    """
    if name not in settings.POLICY_PROFILES:
        raise KeyError(
            f"Unknown policy profile '{name}'. "
            f"Available: {', '.join(sorted(settings.POLICY_PROFILES))}"
        )

    values = dict(settings.POLICY_PROFILES[name])
    env_values = _env_overrides(name)
    if env_values:
        logger.info(f"Policy '{name}': environment overrides for {sorted(env_values)}")
    values.update(env_values)
    values.update(overrides)
    return PolicyConfig(**values)


def available_policies() -> list[str]:
    return sorted(settings.POLICY_PROFILES)
