import logging
import os
import sys

from inkwell.rules.models import Rules

logger = logging.getLogger(__name__)


def missing_env(rules: Rules) -> list[str]:
    return [env_var for env_var in rules.ops.required_env if env_var not in os.environ]


def validate_ops_rules(rules: Rules) -> None:
    """
    Validate operational requirements before startup. Exits on failure.
    """
    missing = missing_env(rules)
    if missing:
        logger.critical("Missing required environment variables: %s", ", ".join(missing))
        sys.exit(1)

    if rules.auth.provider == "remote" and not os.environ.get("INKWELL_IDP_URL"):
        logger.critical("auth.provider is 'remote' but INKWELL_IDP_URL is not set")
        sys.exit(1)

    logger.info("Configuration validated.")
