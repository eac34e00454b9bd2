"""Pydantic request/response models for API endpoints."""

from pydantic import BaseModel

from memory_lane.flow import FlowStatus
from memory_lane.presenter import Screen


class AnswerBody(BaseModel):
    index: int


class AffectionBody(BaseModel):
    delta: int


class GameView(BaseModel):
    status: FlowStatus
    screen: Screen | None = None


class InputResult(BaseModel):
    accepted: bool
    status: FlowStatus
