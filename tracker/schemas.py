"""
Pydantic schemas for the progress tracker API.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class UserInfo(BaseModel):
    username: str
    userType: str


class LoginResponse(BaseModel):
    success: Literal[True] = True
    user: UserInfo


class PatchFieldRequest(BaseModel):
    value: Any = Field(...)


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class ProgressResponse(BaseModel):
    success: Literal[True] = True
    data: dict


class StatsPayload(BaseModel):
    currentDay: Any = None
    totalTasksDone: int
    totalMocks: int
    avgScore: int
    totalTimeMinutes: int | float
    totalTimeHours: float
    daysTracked: int
    lastUpdated: Optional[str] = None


class StatsResponse(BaseModel):
    success: Literal[True] = True
    stats: StatsPayload


class HealthResponse(BaseModel):
    success: Literal[True] = True
    status: Literal["ok"] = "ok"


class ErrorResponse(BaseModel):
    success: Literal[False] = False
    message: str
