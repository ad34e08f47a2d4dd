from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..common.validators import require_uuid
from ..core.constants import DEFAULT_QR_SESSION_MINUTES
from ..core.enums import AttendanceMethod
from ..core.exceptions import ValidationError


class _Body(BaseModel):
    # snake_case or camelCase keys
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


def _uuid(value: str, field: str) -> str:
    try:
        return require_uuid(value, field)
    except ValidationError:
        raise ValueError("must be a valid UUID")


class MarkAttendanceBody(_Body):
    user_id: str = Field(alias="userId")
    attended: bool
    method: AttendanceMethod = AttendanceMethod.MANUAL
    check_in_time: Optional[datetime] = Field(default=None, alias="checkInTime")
    check_out_time: Optional[datetime] = Field(default=None, alias="checkOutTime")
    notes: Optional[str] = Field(default=None, max_length=1000)
    reason: Optional[str] = Field(default=None, max_length=500)

    @field_validator("user_id")
    @classmethod
    def check_user_id(cls, v: str) -> str:
        return _uuid(v, "user_id")


class BulkAttendanceBody(_Body):
    user_ids: list[str] = Field(alias="userIds", min_length=1, max_length=500)
    attended: bool
    method: AttendanceMethod = AttendanceMethod.MANUAL
    notes: Optional[str] = Field(default=None, max_length=1000)
    reason: Optional[str] = Field(default=None, max_length=500)

    @field_validator("user_ids")
    @classmethod
    def check_user_ids(cls, v: list[str]) -> list[str]:
        return [_uuid(uid, "user_ids") for uid in v]


class CheckBody(_Body):
    user_id: str = Field(alias="userId")
    notes: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("user_id")
    @classmethod
    def check_user_id(cls, v: str) -> str:
        return _uuid(v, "user_id")


class CreateQRBody(_Body):
    valid_minutes: int = Field(default=DEFAULT_QR_SESSION_MINUTES, alias="validMinutes", gt=0, le=60 * 24 * 7)
    max_scans: Optional[int] = Field(default=None, alias="maxScans", gt=0)


class QRScanBody(_Body):
    qr_code_data: str = Field(alias="qrCodeData", min_length=1)
