from typing import Literal, Optional

from pydantic import Field, StrictBool

from trainingdesk.schemas.base import CamelModel

StaffStatus = Literal["active", "inactive", "suspended"]
PersonnelStatus = Literal["active", "busy", "inactive"]


class Credential(CamelModel):
    api_key: Optional[str] = None


class StaffCreate(CamelModel):
    api_key: str = Field(min_length=1)
    role: str = Field(min_length=1)
    name: Optional[str] = None
    email: Optional[str] = None


class StaffUpdate(CamelModel):
    # permissions are derived from role, never accepted from the client
    role: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    status: Optional[StaffStatus] = None


class RoleChange(CamelModel):
    staff_id: str = Field(min_length=1)
    new_role: str = Field(min_length=1)


class PersonnelCreate(CamelModel):
    jal_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    max_assignments: Optional[int] = Field(default=None, ge=0)


class InactivationPeriod(CamelModel):
    from_: Optional[str] = Field(default=None, alias="from")
    to: Optional[str] = None
    days: Optional[int] = Field(default=None, ge=0)


class PersonnelUpdate(CamelModel):
    active: Optional[StrictBool] = None
    status: Optional[PersonnelStatus] = None
    max_assignments: Optional[int] = Field(default=None, ge=0)
    inactivation_period: Optional[InactivationPeriod] = None
    last_updated_by: Optional[str] = None


class InactivationCreate(CamelModel):
    user_id: str = Field(min_length=1)
    user_type: Literal["trainer", "examiner"]
    user_name: Optional[str] = None
    user_jal_id: Optional[str] = None
    period: InactivationPeriod = Field(default_factory=InactivationPeriod)
    comments: str = ""
    set_inactive: bool = True
    requested_by: Optional[str] = None


class InactivationReview(CamelModel):
    request_id: str = Field(min_length=1)
    status: Literal["approved", "denied"]
    admin_comments: Optional[str] = None
