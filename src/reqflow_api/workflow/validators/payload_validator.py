"""
Payload Validator

Validates kind-specific payloads at request creation time.
Built-in kinds use the pydantic schemas in models/payloads.py; kinds added
through the rule book alone fall back to their `required_fields` list.
"""

from typing import Any
from typing import Dict
from typing import List

import pydantic
from loguru import logger

from reqflow_api.workflow.exceptions import ValidationError
from reqflow_api.workflow.models.payloads import PAYLOAD_SCHEMAS
from reqflow_api.workflow.models.rulebook import WorkflowDefinition


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, dict)):
        return not value
    return False


def validate_payload(definition: WorkflowDefinition, payload: Any) -> Dict[str, Any]:
    """
    Validate and normalize a payload for a request kind.

    Args:
        definition: Workflow definition of the request kind
        payload: Raw payload submitted with the request

    Returns:
        Normalized payload (JSON-compatible dict)

    Raises:
        ValidationError: With one entry per offending field
    """
    if not isinstance(payload, dict):
        raise ValidationError(
            f"{definition.label} request payload must be an object",
            errors=[{"field": "payload", "msg": "must be an object"}],
        )

    errors: List[Dict[str, Any]] = []

    for field in definition.required_fields:
        if _is_blank(payload.get(field)):
            errors.append({"field": field, "msg": "Field required"})

    if errors:
        raise ValidationError(
            f"{definition.label} request is missing required fields: {', '.join(e['field'] for e in errors)}",
            errors=errors,
        )

    adapter = PAYLOAD_SCHEMAS.get(definition.kind)
    if adapter is None:
        return dict(payload)

    try:
        validated = adapter.validate_python(payload)
    except pydantic.ValidationError as e:
        errors = [
            {"field": ".".join(str(part) for part in err["loc"]) or "payload", "msg": err["msg"]}
            for err in e.errors()
        ]
        logger.debug("Payload validation failed", kind=definition.kind, errors=errors)
        raise ValidationError(
            f"{definition.label} request payload is invalid: {len(errors)} error(s)",
            errors=errors,
        ) from e

    return validated.model_dump(mode="json")
