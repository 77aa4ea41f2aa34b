"""
YAML Parser

Parses rule book YAML files into RuleBook instances.
"""

from pathlib import Path
from typing import TYPE_CHECKING
from typing import Union

import yaml
from loguru import logger

from reqflow_api.workflow.exceptions import RuleBookError

if TYPE_CHECKING:
    from reqflow_api.workflow.rulebook import RuleBook


def parse_rulebook_yaml(file_content: Union[str, bytes, Path]) -> "RuleBook":
    """
    Parse YAML content into a RuleBook.

    Args:
        file_content: YAML content as string, bytes, or Path to file

    Returns:
        RuleBook instance

    Raises:
        RuleBookError: If YAML syntax is invalid or the structure is inconsistent
    """
    from reqflow_api.workflow.rulebook import RuleBook

    # Convert input to string
    if isinstance(file_content, Path):
        content = file_content.read_text(encoding="utf-8")
    elif isinstance(file_content, bytes):
        content = file_content.decode("utf-8")
    else:
        content = file_content

    # Parse YAML
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        logger.error(f"YAML parsing error: {e}")
        raise RuleBookError(f"Invalid YAML syntax: {e}") from e

    if data is None:
        raise RuleBookError("Empty rule book YAML")

    try:
        rulebook = RuleBook.from_dict(data)
    except RuleBookError as e:
        logger.error(f"Rule book validation error: {e}")
        raise

    logger.debug(f"Successfully parsed rule book: {len(rulebook)} kinds ({', '.join(rulebook.kinds)})")
    return rulebook
