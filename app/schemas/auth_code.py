# auth_code_api/app/schemas/auth_code.py
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


# --- Requests ---

class GenerateCodesRequest(BaseModel):
    count: int = 1
    # null is stored as NULL
    notes: Optional[str] = ""


class DeviceCodeRequest(BaseModel):
    """Body of /activate and /verify. Both fields are required by the store,
    but missing ones are reported as a failed outcome, not a 422."""
    device_id: Optional[str] = Field(default=None, alias="deviceId")
    auth_code: Optional[str] = Field(default=None, alias="authCode")

    class Config:
        populate_by_name = True


# --- Responses ---

class AuthCodeInfo(BaseModel):
    """One row of auth_codes, with the original column names."""
    id: int
    auth_code: str = Field(validation_alias="code")
    device_id: Optional[str] = None
    is_used: bool
    created_at: datetime
    activated_at: Optional[datetime] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class GenerateCodesResponse(BaseModel):
    success: bool
    codes: List[str] = []
    message: Optional[str] = None


class ActivateResponse(BaseModel):
    success: bool
    message: str


class VerifyResponse(BaseModel):
    valid: bool


class ListCodesResponse(BaseModel):
    success: bool
    codes: List[AuthCodeInfo] = []
    message: Optional[str] = None


class DeleteCodeResponse(BaseModel):
    success: bool
    message: str
    # False when no row matched; success stays True either way
    deleted: bool = False


class CodeStatsResponse(BaseModel):
    success: bool
    total: int = 0
    used: int = 0
    unused: int = 0
    message: Optional[str] = None
