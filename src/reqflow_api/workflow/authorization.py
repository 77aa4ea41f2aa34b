"""
Role Authorization Gate

Pure table lookups over the rule book. No per-role branching: who may do what
is entirely data in the rule book.
"""

from typing import List
from typing import Union

from reqflow_api.workflow.enums import Role
from reqflow_api.workflow.exceptions import UnknownRoleError
from reqflow_api.workflow.models.rulebook import TransitionRule
from reqflow_api.workflow.rulebook import RuleBook


def parse_role(role: Union[Role, str]) -> Role:
    """
    Validate a role value against the closed Role enumeration.

    Raises:
        UnknownRoleError: If the value is not a known role
    """
    if isinstance(role, Role):
        return role
    try:
        return Role(str(role).strip().lower())
    except ValueError:
        raise UnknownRoleError(f"Unknown role: '{role}'", role=str(role)) from None


def is_authorized(
    rulebook: RuleBook,
    kind: str,
    from_status: str,
    action: str,
    role: Union[Role, str],
) -> bool:
    """
    Check whether `role` may perform `action` on a `kind` request currently in `from_status`.

    True only if the rule table holds a row for exactly this (kind, from_status, action)
    whose authorized roles include `role`.

    Raises:
        UnknownRoleError: If `role` is not a known role
    """
    parsed = parse_role(role)
    rule = rulebook.rule_for(kind, action)
    if rule is None or rule.from_status != from_status:
        return False
    return parsed in rule.roles


def allowed_actions(
    rulebook: RuleBook,
    kind: str,
    status: str,
    role: Union[Role, str],
) -> List[TransitionRule]:
    """
    Rules `role` may fire on a `kind` request in `status` (one button per rule).

    Empty for terminal states and for roles with no stake in the current step.
    """
    parsed = parse_role(role)
    definition = rulebook.get(kind)
    if definition is None:
        return []
    return [rule for rule in definition.rules_from(status) if parsed in rule.roles]


def actionable_statuses(rulebook: RuleBook, kind: str, role: Union[Role, str]) -> List[str]:
    """Statuses of `kind` in which `role` has at least one action ("pending for my role" lists)."""
    parsed = parse_role(role)
    definition = rulebook.get(kind)
    if definition is None:
        return []

    statuses: List[str] = []
    for rule in definition.transitions:
        if parsed in rule.roles and rule.from_status not in statuses:
            statuses.append(rule.from_status)
    return statuses
