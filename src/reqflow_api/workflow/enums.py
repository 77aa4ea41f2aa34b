"""
Workflow Enums

All enum types used throughout the workflow system.
Values must match exactly with the rule book YAML and database constraints.
"""

from enum import Enum

# ════════════════════════════════════════════════════════════════════════════
# Identity Enums
# ════════════════════════════════════════════════════════════════════════════


class Role(str, Enum):
    """Roles an actor can hold. Closed set, validated at the authorization gate."""

    TECHNICIAN = "technician"
    WAREHOUSE = "warehouse"
    LOGISTICS = "logistics"
    HR = "hr"
    IMPLEMENTATION_MANAGER = "implementation_manager"
    PROJECT_MANAGER = "project_manager"
    PLANNING = "planning"
    IT = "it"
    FINANCE = "finance"
    MANAGEMENT = "management"
    EHS = "ehs"  # Environment, health and safety
    PROCUREMENT = "procurement"


# ════════════════════════════════════════════════════════════════════════════
# Request Enums
# ════════════════════════════════════════════════════════════════════════════


class BuiltinKind(str, Enum):
    """Request kinds shipped with the default rule book (others may be added via YAML)."""

    SAFETY_EQUIPMENT = "safety-equipment"
    PURCHASE = "purchase"
    FUEL = "fuel"
    MATERIAL = "material"
    GENERAL = "general"


class Designation(str, Enum):
    """Technician designation on a safety equipment request."""

    ENGINEER = "engineer"
    SUPERVISOR = "supervisor"
    TEAM_LEAD = "team_lead"


class Priority(str, Enum):
    """Urgency/priority of purchase and material requests."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# ════════════════════════════════════════════════════════════════════════════
# Notification Enums
# ════════════════════════════════════════════════════════════════════════════


class NotificationStatus(str, Enum):
    """Notification delivery status."""

    PENDING = "PENDING"
    SENT = "SENT"
    FAILED = "FAILED"


# ════════════════════════════════════════════════════════════════════════════
# Audit Trail Enums
# ════════════════════════════════════════════════════════════════════════════


class AuditAction(str, Enum):
    """Audit trail action types."""

    CREATED = "CREATED"
    STATUS_CHANGED = "STATUS_CHANGED"


# ════════════════════════════════════════════════════════════════════════════
# Infrastructure Enums
# ════════════════════════════════════════════════════════════════════════════


class StoreBackend(str, Enum):
    """Persistence provider behind the request store."""

    MEMORY = "memory"
    POSTGRES = "postgres"


# Action name recorded on the first history entry of every request
CREATE_ACTION = "create"
