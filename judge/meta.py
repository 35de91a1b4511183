from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constant import ExecutionStatus, Language


class ExecutionRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    language: Language
    code: str
    inputList: List[str] = Field(default_factory=list)

    @field_validator('language', mode='before')
    @classmethod
    def _coerce_language(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
        return v

    @field_validator('code')
    @classmethod
    def validate_code(cls, v):
        if not v.strip():
            raise ValueError('source code is empty')
        return v


class JudgeInfo(BaseModel):
    time: Optional[int] = None  # ms
    memory: Optional[int] = None  # bytes


class ExecutionResponse(BaseModel):
    status: ExecutionStatus
    outputList: List[str] = Field(default_factory=list)
    message: str = ''
    judgeInfo: JudgeInfo = Field(default_factory=JudgeInfo)
