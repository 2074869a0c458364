"""
Appliance Data Models

Pydantic request/response models for appliances and their time windows.
Converts to and from the optimizer's dataclasses.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from tarifa.optimization.appliance_models import (
    Appliance,
    Priority,
    RestrictionKind,
    TimeRestriction,
)
from tarifa.optimization.validation import MAX_DURATION_HOURS, MAX_POWER_WATTS

TIME_FIELD_PATTERN = r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$"


class TimeRestrictionSchema(BaseModel):
    """A forbidden or preferred time window ("HH:MM" bounds)"""

    model_config = ConfigDict(from_attributes=True)

    start: str = Field(..., pattern=TIME_FIELD_PATTERN)
    end: str = Field(..., pattern=TIME_FIELD_PATTERN)
    kind: RestrictionKind = RestrictionKind.FORBIDDEN

    def to_domain(self) -> TimeRestriction:
        return TimeRestriction(start=self.start, end=self.end, kind=self.kind)


class ApplianceBase(BaseModel):
    """Fields shared by appliance create and response models"""

    name: str = Field(..., min_length=1, max_length=200)
    power_watts: float = Field(..., gt=0, le=MAX_POWER_WATTS)
    duration_hours: float = Field(..., gt=0, le=MAX_DURATION_HOURS)
    priority: Priority = Priority.MEDIUM
    restrictions: List[TimeRestrictionSchema] = Field(default_factory=list)


class ApplianceCreate(ApplianceBase):
    """Request model for creating an appliance"""

    def to_domain(self, appliance_id: str) -> Appliance:
        return Appliance(
            id=appliance_id,
            name=self.name.strip(),
            power_watts=self.power_watts,
            duration_hours=self.duration_hours,
            priority=self.priority,
            restrictions=tuple(r.to_domain() for r in self.restrictions),
        )


class ApplianceUpdate(BaseModel):
    """Request model for a partial appliance update"""

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    power_watts: Optional[float] = Field(default=None, gt=0, le=MAX_POWER_WATTS)
    duration_hours: Optional[float] = Field(default=None, gt=0, le=MAX_DURATION_HOURS)
    priority: Optional[Priority] = None
    restrictions: Optional[List[TimeRestrictionSchema]] = None


class ApplianceResponse(ApplianceBase):
    """Response model for an appliance"""

    model_config = ConfigDict(from_attributes=True)

    id: str

    @classmethod
    def from_domain(cls, appliance: Appliance) -> "ApplianceResponse":
        return cls(
            id=appliance.id,
            name=appliance.name,
            power_watts=appliance.power_watts,
            duration_hours=appliance.duration_hours,
            priority=appliance.priority,
            restrictions=[
                TimeRestrictionSchema(start=r.start, end=r.end, kind=r.kind)
                for r in appliance.restrictions
            ],
        )


class ApplianceListResponse(BaseModel):
    """Response model for the appliance list"""

    appliances: List[ApplianceResponse]
    total: int


class ApplianceImportRequest(BaseModel):
    """Replace the whole appliance list"""

    appliances: List[ApplianceCreate]
