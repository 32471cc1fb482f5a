"""Loading and validation of ``rules.yaml``."""

from pathlib import Path

import yaml
from pydantic import ValidationError

from inkwell.rules.models import Rules


def load_rules(path: Path) -> Rules:
    """
    Parse the rules file at ``path``. Sections or keys left out keep their defaults.

    Raises FileNotFoundError if the file is missing and ValueError if it is not
    valid YAML or does not match the Rules schema.
    """
    if not path.exists():
        raise FileNotFoundError(f"Rules file not found at: {path}")

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in {path}: {e}") from e

    if data is None:
        return Rules()
    if not isinstance(data, dict):
        raise ValueError(f"{path} must hold a mapping of sections, not {type(data).__name__}")

    try:
        return Rules.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Rules validation failed for {path}:\n{e}") from e
