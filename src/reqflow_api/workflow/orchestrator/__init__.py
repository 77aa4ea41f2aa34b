"""
Workflow Orchestrator Module

Transition engine driving requests through their kind's state machine.
"""

from reqflow_api.workflow.orchestrator.engine import RequestWorkflowEngine
from reqflow_api.workflow.orchestrator.engine import generate_request_id

__all__ = [
    "RequestWorkflowEngine",
    "generate_request_id",
]
