"""
Workflow Validators Module

Creation-time validation of kind-specific request payloads.
"""

from reqflow_api.workflow.validators.payload_validator import validate_payload

__all__ = [
    "validate_payload",
]
