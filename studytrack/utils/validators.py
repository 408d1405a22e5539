"""Input validation using Pydantic."""

from typing import Optional, Dict, Any, List
from pydantic import BaseModel, ConfigDict, Field, field_validator, ValidationError as PydanticValidationError
from studytrack.utils.exceptions import ValidationError

PLAN_LEVELS = ('beginner', 'intermediate', 'advanced')
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def _parse_hours(v: Any) -> float:
    if isinstance(v, str):
        v = v.strip()
    try:
        hours = float(v)
    except (TypeError, ValueError):
        raise ValueError('hours must be a positive number')
    if hours <= 0:
        raise ValueError('hours must be a positive number')
    return hours


class CreatePlanRequest(BaseModel):
    """Validation schema for the new-plan form."""
    topic: str = Field(..., description="What the plan is about")
    total_hours: float = Field(..., description="Planned effort in hours")
    level: Optional[str] = Field(None, description="beginner, intermediate or advanced")

    model_config = ConfigDict(extra='forbid')

    @field_validator('topic', mode='before')
    @classmethod
    def validate_topic(cls, v):
        if v is None or not str(v).strip():
            raise ValueError('topic is required')
        return str(v).strip()

    @field_validator('total_hours', mode='before')
    @classmethod
    def validate_hours(cls, v):
        return _parse_hours(v)

    @field_validator('level', mode='before')
    @classmethod
    def validate_level(cls, v):
        if v is None or not str(v).strip():
            return None
        level = str(v).strip().lower()
        if level not in PLAN_LEVELS:
            raise ValueError(f"level must be one of {', '.join(PLAN_LEVELS)}")
        return level


class UpdatePlanRequest(BaseModel):
    """Validation schema for the edit-plan form."""
    title: str = Field(..., description="Plan title")
    total_hours: float = Field(..., description="Planned effort in hours")
    tags: List[str] = Field(default_factory=list, description="Comma separated tags")

    model_config = ConfigDict(extra='forbid')

    @field_validator('title', mode='before')
    @classmethod
    def validate_title(cls, v):
        if v is None or not str(v).strip():
            raise ValueError('title is required')
        return str(v).strip()

    @field_validator('total_hours', mode='before')
    @classmethod
    def validate_hours(cls, v):
        return _parse_hours(v)

    @field_validator('tags', mode='before')
    @classmethod
    def split_tags(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(',')
        tags = []
        for tag in v:
            tag = str(tag).strip()
            if tag and tag not in tags:
                tags.append(tag)
        return tags


class StorageSettings(BaseModel):
    data_file: Optional[str] = 'data/studytrack.yaml'

    model_config = ConfigDict(extra='forbid')


class TUISettings(BaseModel):
    page_size: int = Field(default=20, ge=1, le=500, description="Rows shown in session history")
    progress_bar_width: int = Field(default=40, ge=5, le=200)
    # strftime pattern for session history dates; None keeps 'Mar 1, 2024 19:00'
    date_format: Optional[str] = None

    model_config = ConfigDict(extra='forbid')


class ExportSettings(BaseModel):
    output_dir: str = 'reports'

    model_config = ConfigDict(extra='forbid')


class LoggingSettings(BaseModel):
    log_level: str = 'INFO'
    log_file: Optional[str] = 'logs/studytrack.log'

    model_config = ConfigDict(extra='forbid')

    @field_validator('log_level')
    @classmethod
    def validate_level(cls, v):
        if v.upper() not in LOG_LEVELS:
            raise ValueError(f'log_level must be one of {LOG_LEVELS}')
        return v.upper()


class Settings(BaseModel):
    """Validated application configuration."""
    storage: StorageSettings = Field(default_factory=StorageSettings)
    tui: TUISettings = Field(default_factory=TUISettings)
    export: ExportSettings = Field(default_factory=ExportSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = ConfigDict(extra='forbid')


def validate_request(data: Dict[str, Any], schema: type[BaseModel]) -> BaseModel:
    """
    Validate request data against a Pydantic schema.

    Args:
        data: Request data dictionary
        schema: Pydantic model class

    Returns:
        Validated model instance

    Raises:
        ValidationError: If validation fails
    """
    try:
        return schema(**data)
    except PydanticValidationError as e:
        errors = []
        messages = []
        for error in e.errors():
            field = '.'.join(str(x) for x in error['loc'])
            msg = error['msg']
            if msg.startswith('Value error, '):
                msg = msg[len('Value error, '):]
            errors.append(f"{field}: {msg}")
            messages.append(msg)
        raise ValidationError(
            message=messages[0] if messages else "Validation failed",
            error_code="VALIDATION_ERROR",
            details={"errors": errors, "messages": messages}
        )
