"""Pydantic models for request and response validation."""

from typing import Optional

from pydantic import BaseModel, Field


class HeartRateSample(BaseModel):
    """Request model for a single heart rate reading."""

    value: float = Field(..., strict=True, gt=0, allow_inf_nan=False, description="Heart rate in bpm")
    timestamp: str = Field(..., min_length=1, description="Time the reading was taken")
    source: Optional[str] = Field(None, description="Free-text device or source label")


class IngestResponse(BaseModel):
    """Response model for a forwarded reading."""

    success: bool = Field(..., description="Whether the database accepted the write")
    message: str = Field(..., description="Human readable outcome")
    processed_count: int = Field(..., description="Number of readings written")


class HealthResponse(BaseModel):
    status: str = Field(default="healthy")
    service: str = Field(default="heart-rate-relay")
