from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Optional

class ToolRequest(BaseModel):
    name: Any = Field(default=None, description="Tool to run, e.g. generate_image")
    arguments: Any = Field(default=None, description="Tool arguments object")

    def argument_dict(self) -> dict:
        # Anything that is not an object counts as no arguments at all
        return self.arguments if isinstance(self.arguments, dict) else {}

class ToolResult(BaseModel):
    message: Optional[str] = Field(default=None, description="Human-readable success message")
    file: Optional[str] = Field(default=None, description="Absolute path of the downloaded image")
    error: Optional[str] = Field(default=None, description="Human-readable failure message")

    @classmethod
    def success(cls, message: str, file: str) -> "ToolResult":
        return cls(message=message, file=file)

    @classmethod
    def failure(cls, error: str) -> "ToolResult":
        return cls(error=error)

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_response(self) -> dict:
        return self.model_dump(exclude_none=True)

class Prediction(BaseModel):
    '''Subset of a Replicate prediction object; unknown fields are kept.'''
    model_config = ConfigDict(extra='allow')

    id: Optional[str] = None
    status: Optional[str] = None
    output: Any = None
    error: Any = None
