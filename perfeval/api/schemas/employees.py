from __future__ import annotations

from pydantic import BaseModel, Field


class EmployeeWriteRequest(BaseModel):
    name: str = Field(..., min_length=1)
    department_id: str = Field(..., min_length=1)
    user_id: str | None = Field(None, description="Console account linked to the employee")
    position: str = ""
    is_remote: bool = False
