"""User data model for TaskMind."""

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field


class User(BaseModel):
    """Student profile. Credentials live with the external auth service."""

    id: str = Field(..., description="Unique user identifier")
    email: str = Field(..., description="User email address")
    name: Optional[str] = Field(None, description="User display name")
    course: Optional[str] = Field(None, description="Degree course")
    semester: Optional[int] = Field(None, description="Current semester")
    birth_date: Optional[date] = Field(None, description="Date of birth")
    phone: Optional[str] = Field(None, description="Contact phone number")
    created_at: datetime = Field(..., description="User creation timestamp")
    updated_at: datetime = Field(..., description="User last update timestamp")
