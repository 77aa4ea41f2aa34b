"""
Rule Book

In-memory index over the per-kind workflow definitions.
Built from YAML (see parsers/yaml_parser.py) or from plain dicts.
"""

from pathlib import Path
from typing import Any
from typing import Dict
from typing import Iterable
from typing import List
from typing import Optional

import pydantic
from loguru import logger

from reqflow_api.workflow.exceptions import RuleBookError
from reqflow_api.workflow.models.rulebook import TransitionRule
from reqflow_api.workflow.models.rulebook import WorkflowDefinition

DEFAULT_RULES_PATH = Path(__file__).parent / "rules" / "default_rules.yaml"


class RuleBook:
    """
    Declarative rule table: kind -> WorkflowDefinition.

    Immutable after construction. The engine, the authorization gate and the
    HTTP layer all read from the same instance.
    """

    def __init__(self, definitions: Iterable[WorkflowDefinition], version: str = "1.0"):
        self.version = version
        self._definitions: Dict[str, WorkflowDefinition] = {}
        for definition in definitions:
            if definition.kind in self._definitions:
                raise RuleBookError(f"Kind '{definition.kind}' defined more than once")
            self._definitions[definition.kind] = definition

        if not self._definitions:
            raise RuleBookError("Rule book must define at least one request kind")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RuleBook":
        """
        Build a rule book from the YAML document structure.

        Args:
            data: {"version": "...", "kinds": {kind: {label, initial, states, ...}}}

        Raises:
            RuleBookError: If the structure or any definition is invalid
        """
        if not isinstance(data, dict) or not isinstance(data.get("kinds"), dict):
            raise RuleBookError("Rule book must contain a 'kinds' mapping")

        definitions: List[WorkflowDefinition] = []
        for kind, body in data["kinds"].items():
            if not isinstance(body, dict):
                raise RuleBookError(f"Definition for kind '{kind}' must be a mapping")
            try:
                definitions.append(WorkflowDefinition(kind=kind, **body))
            except pydantic.ValidationError as e:
                raise RuleBookError(f"Invalid definition for kind '{kind}': {e}") from e

        return cls(definitions, version=str(data.get("version", "1.0")))

    @property
    def kinds(self) -> List[str]:
        """Declared kinds, in definition order."""
        return list(self._definitions)

    def get(self, kind: str) -> Optional[WorkflowDefinition]:
        """Definition for a kind, or None if undeclared."""
        return self._definitions.get(kind)

    def require(self, kind: str) -> WorkflowDefinition:
        """Definition for a kind a stored request already carries."""
        definition = self._definitions.get(kind)
        if definition is None:
            raise RuleBookError(f"No workflow definition for kind '{kind}'")
        return definition

    def rule_for(self, kind: str, action: str) -> Optional[TransitionRule]:
        """Rule for (kind, action), or None."""
        definition = self._definitions.get(kind)
        return definition.rule_for(action) if definition else None

    def __contains__(self, kind: object) -> bool:
        return kind in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)


def default_rulebook() -> RuleBook:
    """Load the rule book shipped with the package."""
    from reqflow_api.workflow.parsers.yaml_parser import parse_rulebook_yaml

    return parse_rulebook_yaml(DEFAULT_RULES_PATH)


def load_rulebook(rules_file: Optional[str] = None) -> RuleBook:
    """
    Load the configured rule book, falling back to the packaged default.

    Args:
        rules_file: Optional path to a deployment-specific YAML rule book
    """
    from reqflow_api.workflow.parsers.yaml_parser import parse_rulebook_yaml

    if not rules_file:
        return default_rulebook()

    path = Path(rules_file)
    if not path.exists():
        raise RuleBookError(f"Rules file not found: {path}")

    rulebook = parse_rulebook_yaml(path)
    logger.info("Loaded custom rule book", rules_file=str(path), kinds=rulebook.kinds)
    return rulebook
