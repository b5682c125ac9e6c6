import logging
import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass

from resource_tracking.rules.models import Rules

logger = logging.getLogger(__name__)

API_URL_ENV = "ANALYTICS_API_URL"
API_TOKEN_ENV = "ANALYTICS_API_TOKEN"


@dataclass(frozen=True)
class ApiSettings:
    base_url: str
    token: str | None
    timeout_seconds: float


def validate_ops_rules(rules: Rules, environ: Mapping[str, str] | None = None) -> None:
    """
    Validate operational requirements before startup.
    """
    env = os.environ if environ is None else environ

    missing = [name for name in rules.ops.required_env if name not in env]
    if missing:
        logger.critical("Missing required environment variables: %s", ", ".join(missing))
        sys.exit(1)

    logger.info("Configuration validated.")


def resolve_api_settings(rules: Rules, environ: Mapping[str, str] | None = None) -> ApiSettings:
    """Environment overrides the rules file for the API URL; the token is env-only."""
    env = os.environ if environ is None else environ
    return ApiSettings(
        base_url=env.get(API_URL_ENV) or rules.analytics_api.base_url,
        token=env.get(API_TOKEN_ENV) or None,
        timeout_seconds=rules.analytics_api.timeout_seconds,
    )
