"""
Rule Book Models

Pydantic models for the declarative rule table: one WorkflowDefinition per request kind,
each holding its states and the transitions (with authorized roles) between them.
"""

from typing import List
from typing import Optional

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator
from pydantic import model_validator

from reqflow_api.workflow.enums import Role


class TransitionRule(BaseModel):
    """A single `from --action(roles)--> to` row of the rule table."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    action: str
    from_status: str = Field(alias="from")
    to_status: str = Field(alias="to")
    roles: List[Role] = Field(min_length=1)
    past_tense: Optional[str] = None  # Verb used in notifications, defaults to "<action>d"

    @field_validator("action")
    @classmethod
    def validate_action(cls, v: str) -> str:
        """Action names are lowercase identifiers."""
        v = v.strip().lower()
        if not v:
            raise ValueError("action cannot be empty")
        return v

    @property
    def verb(self) -> str:
        """Past-tense verb for messages ("acknowledged", "issued", ...)."""
        if self.past_tense:
            return self.past_tense
        return self.action + ("d" if self.action.endswith("e") else "ed")


class WorkflowDefinition(BaseModel):
    """State machine for one request kind."""

    kind: str
    label: str  # Human name used in messages ("Safety equipment")
    id_prefix: str = "REQ"
    initial: str
    states: List[str] = Field(min_length=1)
    terminal: List[str] = Field(default_factory=list)
    required_fields: List[str] = Field(default_factory=list)
    transitions: List[TransitionRule] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_consistency(self) -> "WorkflowDefinition":
        """Every referenced state is declared, terminal states are absorbing, actions are unique."""
        declared = set(self.states)

        if len(declared) != len(self.states):
            raise ValueError(f"{self.kind}: duplicate state names")

        if self.initial not in declared:
            raise ValueError(f"{self.kind}: initial state '{self.initial}' is not declared")

        for state in self.terminal:
            if state not in declared:
                raise ValueError(f"{self.kind}: terminal state '{state}' is not declared")

        seen_actions = set()
        for rule in self.transitions:
            if rule.action in seen_actions:
                raise ValueError(f"{self.kind}: action '{rule.action}' declared more than once")
            seen_actions.add(rule.action)

            for state in (rule.from_status, rule.to_status):
                if state not in declared:
                    raise ValueError(f"{self.kind}: action '{rule.action}' references undeclared state '{state}'")

            if rule.from_status in self.terminal:
                raise ValueError(
                    f"{self.kind}: action '{rule.action}' leaves terminal state '{rule.from_status}'"
                )

        return self

    def rule_for(self, action: str) -> Optional[TransitionRule]:
        """Rule for an action name, or None if the kind does not declare it."""
        action = action.strip().lower()
        for rule in self.transitions:
            if rule.action == action:
                return rule
        return None

    def rules_from(self, status: str) -> List[TransitionRule]:
        """All rules whose source state is `status`."""
        return [rule for rule in self.transitions if rule.from_status == status]

    def is_terminal(self, status: str) -> bool:
        """Terminal states are those listed as terminal or with no outgoing transition."""
        return status in self.terminal or not self.rules_from(status)
