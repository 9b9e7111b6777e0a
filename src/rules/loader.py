import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from src.rules.models import Rules

logger = logging.getLogger(__name__)


def extract_yaml(content: str) -> str:
    """First ```yaml fenced block of a markdown doc, or the content unchanged."""
    block: list[str] = []
    in_block = False

    for line in content.splitlines():
        stripped = line.strip()
        if not in_block:
            in_block = stripped.startswith("```yaml")
            continue
        if stripped.startswith("```"):
            return "\n".join(block)
        block.append(line)

    return "\n".join(block) if in_block else content


def load_rules(path: str | Path) -> Rules:
    """
    Load and validate the analytics rules file.

    Raises FileNotFoundError if the file is missing, ValueError if the YAML or
    the schema is invalid.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Rules file not found at: {path}")

    try:
        data = yaml.safe_load(extract_yaml(path.read_text()))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in rules file: {e}") from e

    try:
        rules = Rules.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Rules validation failed:\n{e}") from e

    logger.debug("Loaded rules %s v%s from %s", rules.project.slug, rules.project.rules_version, path)
    return rules
