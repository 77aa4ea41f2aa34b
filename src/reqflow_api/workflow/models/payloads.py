"""
Request Payload Models

Kind-specific payload schemas checked when a request is created.
After creation the payload is opaque to the transition engine.
"""

from typing import Annotated
from typing import Any
from typing import Dict
from typing import List
from typing import Literal
from typing import Optional
from typing import Union

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import TypeAdapter
from pydantic import field_validator
from pydantic import model_validator

from reqflow_api.workflow.enums import BuiltinKind
from reqflow_api.workflow.enums import Priority

# ════════════════════════════════════════════════════════════════════════════
# Line Items
# ════════════════════════════════════════════════════════════════════════════


class EquipmentItem(BaseModel):
    """Safety equipment line item."""

    name: str = Field(min_length=1)
    quantity: int = Field(ge=1)


class CasualEquipment(BaseModel):
    """Equipment requested by a supervisor for one casual worker."""

    name: str = Field(min_length=1)
    items: List[EquipmentItem] = Field(min_length=1)


class MaterialItem(BaseModel):
    """Material line item for a site."""

    name: str = Field(min_length=1)
    quantity: int = Field(ge=1)
    unit: str = Field(min_length=1)


# ════════════════════════════════════════════════════════════════════════════
# Safety Equipment (discriminated on designation)
# ════════════════════════════════════════════════════════════════════════════


class _SafetyEquipmentBase(BaseModel):
    model_config = ConfigDict(extra="allow")

    reason: str = Field(min_length=10)
    photos: List[Any] = Field(default_factory=list)


class EngineerSafetyPayload(_SafetyEquipmentBase):
    """Engineer requesting equipment for themselves."""

    designation: Literal["engineer"]
    equipment: List[EquipmentItem] = Field(min_length=1)


class SupervisorSafetyPayload(_SafetyEquipmentBase):
    """Supervisor requesting equipment for casual workers."""

    designation: Literal["supervisor"]
    casuals: List[CasualEquipment] = Field(min_length=1)


class TeamLeadSafetyPayload(_SafetyEquipmentBase):
    """Team lead requesting for themselves and optionally one employee."""

    designation: Literal["team_lead"]
    self_equipment: List[EquipmentItem] = Field(min_length=1)
    employee_name: Optional[str] = None
    employee_equipment: List[EquipmentItem] = Field(default_factory=list)


SafetyEquipmentPayload = Annotated[
    Union[EngineerSafetyPayload, SupervisorSafetyPayload, TeamLeadSafetyPayload],
    Field(discriminator="designation"),
]


# ════════════════════════════════════════════════════════════════════════════
# Purchase, Fuel, Material
# ════════════════════════════════════════════════════════════════════════════


class PurchasePayload(BaseModel):
    """Procurement purchase request."""

    model_config = ConfigDict(extra="allow")

    item: str = Field(min_length=3)
    quantity: int = Field(ge=1)
    urgency: Priority
    department: str = Field(min_length=1)
    supplier: Optional[str] = None
    justification: str = Field(min_length=10)
    attachment: Optional[str] = None


class FuelPayload(BaseModel):
    """Fuel request for a fleet vehicle."""

    model_config = ConfigDict(extra="allow")

    vehicle_id: str = Field(min_length=1)
    vehicle_plate: str = Field(min_length=1)
    amount: float = Field(gt=0)
    reason: str = Field(min_length=1)

    @field_validator("vehicle_plate")
    @classmethod
    def normalize_plate(cls, v: str) -> str:
        """Plates are stored uppercase."""
        return v.strip().upper()


class MaterialPayload(BaseModel):
    """Site material request handled by the warehouse."""

    model_config = ConfigDict(extra="allow")

    site_name: str = Field(min_length=1)
    site_location: str = Field(min_length=1)
    materials: List[MaterialItem] = Field(min_length=1)
    priority: Priority = Priority.MEDIUM


# ════════════════════════════════════════════════════════════════════════════
# General
# ════════════════════════════════════════════════════════════════════════════


class GeneralPayload(BaseModel):
    """General request report routed through finance before logistics hand-off."""

    model_config = ConfigDict(extra="allow")

    title: str = Field(min_length=3)
    description: Optional[str] = None
    request_type: str = Field(min_length=1)
    amount: Optional[float] = Field(default=None, gt=0)
    units: Optional[str] = None

    @model_validator(mode="after")
    def units_need_amount(self) -> "GeneralPayload":
        """Units only make sense alongside an amount."""
        if self.units and self.amount is None:
            raise ValueError("units given without an amount")
        return self


# Kind -> adapter used to validate and normalize the payload
PAYLOAD_SCHEMAS: Dict[str, TypeAdapter] = {
    BuiltinKind.SAFETY_EQUIPMENT.value: TypeAdapter(SafetyEquipmentPayload),
    BuiltinKind.PURCHASE.value: TypeAdapter(PurchasePayload),
    BuiltinKind.FUEL.value: TypeAdapter(FuelPayload),
    BuiltinKind.MATERIAL.value: TypeAdapter(MaterialPayload),
    BuiltinKind.GENERAL.value: TypeAdapter(GeneralPayload),
}
