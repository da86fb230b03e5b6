from datetime import datetime

from pydantic import BaseModel, field_validator


class TicketRecord(BaseModel):
    id: int
    name: str = ""
    date_creation: datetime
    date_solved: datetime | None = None
    date_closed: datetime | None = None
    status_id: int
    status_label: str
    priority_id: int
    priority_label: str
    category_name: str | None = None
    location_name: str | None = None
    department_name: str | None = None
    time_to_resolve: int = 0
    slas_id_ttr: int | None = None
    is_sla_violated: bool = False
    count_cless_one_hour: bool = False
    sla_time_limit: datetime | None = None

    model_config = {"from_attributes": True}

    @field_validator("time_to_resolve", mode="before")
    @classmethod
    def unresolved_is_zero(cls, value):
        # The view returns NULL for unresolved tickets
        return 0 if value is None else value

    @field_validator("is_sla_violated", "count_cless_one_hour", mode="before")
    @classmethod
    def null_flag_is_false(cls, value):
        return False if value is None else value

    @field_validator("name", mode="before")
    @classmethod
    def null_name_is_empty(cls, value):
        return "" if value is None else value
