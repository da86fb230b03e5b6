from pydantic import BaseModel, Field


class Goals(BaseModel):
    sla: float = Field(90, ge=0, le=100)
    fcr: float = Field(80, ge=0, le=100)
    time: float = Field(4, ge=0)


class GoalsUpdate(BaseModel):
    sla: float | None = Field(None, ge=0, le=100)
    fcr: float | None = Field(None, ge=0, le=100)
    time: float | None = Field(None, ge=0)
