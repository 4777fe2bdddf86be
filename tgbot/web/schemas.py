"""Модели запросов HTTP API."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tgbot.misc.departments import is_valid_department


class NotificationCreate(BaseModel):
    """Тело запроса на создание уведомления"""

    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(min_length=1)
    departments: list[str] = Field(min_length=1)
    created_by: Optional[str] = Field(default=None, alias="createdBy")

    @field_validator("message")
    @classmethod
    def message_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("message must not be blank")
        return value

    @field_validator("departments")
    @classmethod
    def departments_known(cls, value: list[str]) -> list[str]:
        unknown = [department for department in value if not is_valid_department(department)]
        if unknown:
            raise ValueError(f"unknown departments: {', '.join(unknown)}")
        return value
