"""Request models for the HTTP API."""

from pydantic import BaseModel, Field


class AnalyzeMenuRequest(BaseModel):
    menu_text: str


class StyleRequest(BaseModel):
    style: str
    custom_text: str = ""


class InstructionRequest(BaseModel):
    instruction: str


class VariationsRequest(BaseModel):
    instruction: str
    count: int | None = Field(default=None, ge=1, le=8)


class SelectVariationRequest(BaseModel):
    index: int = Field(ge=0)
