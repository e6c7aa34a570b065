"""Task schemas."""

from datetime import datetime

from pydantic import BaseModel


class TaskStatusResponse(BaseModel):
    """Schema for release generation progress snapshot."""

    task_id: str
    status: str
    stage: str | None = None
    org_id: str | None = None
    current_step_name: str | None = None
    completed_steps: int = 0
    total_steps: int | None = None
    progress_percent: float | None = None
    error_message: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
