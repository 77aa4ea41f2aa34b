"""
Workflow Parsers Module

YAML parser for rule book definitions.
"""

from reqflow_api.workflow.parsers.yaml_parser import parse_rulebook_yaml

__all__ = [
    "parse_rulebook_yaml",
]
