"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from models.records import RunState, SensorSnapshot


class ReadingResponse(BaseModel):
    """One reading as exposed to clients."""

    value: float
    timestamp: str = Field(..., description="Capture time formatted as HH:MM:SS.")


class SnapshotResponse(BaseModel):
    """Window contents, derived statistics and run state at one point in time."""

    readings: List[ReadingResponse] = Field(
        default_factory=list, description="Newest reading first."
    )
    current_value: Optional[float] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    average_value: Optional[float] = None
    run_state: Optional[RunState] = Field(
        default=None, description="Absent until the monitor has started."
    )
    sequence: int = Field(..., ge=0)

    @classmethod
    def from_snapshot(cls, snapshot: SensorSnapshot) -> "SnapshotResponse":
        return cls(
            readings=[
                ReadingResponse(value=reading.value, timestamp=reading.timestamp)
                for reading in snapshot.readings
            ],
            current_value=snapshot.current_value,
            min_value=snapshot.min_value,
            max_value=snapshot.max_value,
            average_value=snapshot.average_value,
            run_state=snapshot.run_state,
            sequence=snapshot.sequence,
        )


class RunStateRequest(BaseModel):
    """Explicit run-state change requested by a client."""

    state: RunState
