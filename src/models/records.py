"""Operational records supplied to the rules engine by its collaborators."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from src.models.schema import ContainerSize, ContainerType, CustomsStatus, MatchType


class ContainerRecord(BaseModel):
    """Container attributes as read from the container repository.

    The container number is kept as a raw string so that a malformed value can
    reach the validators and be reported, rather than failing at parse time.

    Attributes:
        container_number: ISO 6346 identifier (e.g. "CSQU3054383")
        size: Nominal length in feet
        container_type: Equipment type
        weight_lbs: Gross weight in pounds (optional until weighed)
        is_hazmat: Whether the cargo is declared hazardous
        hazmat_class: DOT hazard class, e.g. "3" or "2.1"
        un_number: UN identification number, e.g. "UN1203"
        is_reefer: Whether the container is refrigerated
        temperature_setpoint_c: Reefer setpoint in degrees Celsius
        customs_status: Customs clearance status
    """
    container_number: str
    size: ContainerSize
    container_type: ContainerType = ContainerType.DRY
    weight_lbs: Optional[int] = None
    is_hazmat: bool = False
    hazmat_class: Optional[str] = None
    un_number: Optional[str] = None
    is_reefer: bool = False
    temperature_setpoint_c: Optional[float] = None
    customs_status: CustomsStatus = CustomsStatus.PENDING


class ShipmentDates(BaseModel):
    """Milestone dates of a shipment; any of them may be unknown."""
    vessel_eta: Optional[date] = None
    last_free_day: Optional[date] = None
    port_cutoff: Optional[datetime] = None
    documentation_cutoff: Optional[datetime] = None


class ImportCandidate(BaseModel):
    """An import container waiting for (or out on) delivery.

    Attributes:
        reference: Shipment reference number
        container_number: Container identifier
        size: Container size
        container_type: Container type
        terminal: Terminal the container was discharged at
        customs_status: Only RELEASED containers can be street-turned
        last_free_day: Demurrage starts after this date
        customer: Import customer name (optional)
    """
    reference: str
    container_number: str
    size: ContainerSize
    container_type: ContainerType = ContainerType.DRY
    terminal: str
    customs_status: CustomsStatus
    last_free_day: Optional[date] = None
    customer: Optional[str] = None


class ExportCandidate(BaseModel):
    """A pending export booking that needs an empty container."""
    reference: str
    size: ContainerSize
    container_type: ContainerType = ContainerType.DRY
    terminal: str
    port_cutoff: Optional[datetime] = None
    customer: Optional[str] = None


class StreetTurnCandidate(BaseModel):
    """Derived pairing of an import container with an export booking."""
    import_reference: str
    import_container: str
    import_terminal: str
    import_last_free_day: Optional[date] = None
    export_reference: str
    export_terminal: str
    export_cutoff: Optional[datetime] = None
    container_size: ContainerSize
    match_type: MatchType
    estimated_savings: Decimal = Field(ge=0)

    model_config = ConfigDict(frozen=True)
