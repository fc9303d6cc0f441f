"""
Request and response models for the directory API.
"""

from pydantic import BaseModel, field_validator
from typing import Optional, List


class EmployeeCreateRequest(BaseModel):
    name: str
    designation: str
    department: str
    photo_url: Optional[str] = None

    @field_validator('name')
    @classmethod
    def name_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('name cannot be empty')
        return v.strip()

    @field_validator('designation')
    @classmethod
    def designation_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('designation cannot be empty')
        return v.strip()

    @field_validator('department')
    @classmethod
    def department_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('department cannot be empty')
        return v.strip()


class EmployeeResponse(BaseModel):
    id: int
    name: str
    designation: str
    department: str
    created_at: str
    photo_url: Optional[str] = None
    updated_at: Optional[str] = None


class EmployeeListResponse(BaseModel):
    employees: List[EmployeeResponse]
    count: int


class DedupeResponse(BaseModel):
    removed: int
    message: str


class MessageResponse(BaseModel):
    success: bool
    message: str


class HealthResponse(BaseModel):
    status: str
    version: str
    backend: str
    db_health: bool
    employee_count: int
    realtime: bool
