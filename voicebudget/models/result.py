"""
Result Models

ExecutionResult is what the executor returns for one command.
VoiceResponse is what the entry point returns to its caller; its
payload form is the contract shared by every front end:

    {"success": bool, "command": {...}, "message": str, "audioResponse"?: str}
"""

import html
from typing import Optional

from pydantic import BaseModel, Field

from voicebudget.models.command import Command, command_to_payload
from voicebudget.models.records import BudgetSummary


class ExecutionResult(BaseModel):
    """Outcome of executing one command."""

    success: bool
    command: Command
    message: str = Field(
        ...,
        description="Short confirmation or failure message for display"
    )
    audio_response: Optional[str] = Field(
        default=None,
        description="Friendlier phrasing meant to be spoken"
    )
    cancelled: bool = Field(
        default=False,
        description="Caller abandoned the request before it finished"
    )

    # Details for callers that want more than the message
    transaction_id: Optional[str] = None
    entity_id: Optional[str] = None
    summary: Optional[BudgetSummary] = None


class VoiceResponse(BaseModel):
    """Result of processing one voice or typed command end to end."""

    success: bool
    command: Command
    message: str
    audio_response: Optional[str] = None
    transcript: str = Field(
        default="",
        description="Text that was parsed (typed or transcribed)"
    )
    cancelled: bool = False
    audio: Optional[bytes] = Field(
        default=None,
        exclude=True,
        description="Synthesized speech for audio_response, if any"
    )

    @classmethod
    def from_execution(
        cls,
        result: ExecutionResult,
        transcript: str,
    ) -> "VoiceResponse":
        return cls(
            success=result.success,
            command=result.command,
            message=result.message,
            audio_response=result.audio_response,
            transcript=transcript,
            cancelled=result.cancelled,
        )

    def to_payload(self) -> dict:
        """Wire form of the response."""
        payload = {
            "success": self.success,
            "command": command_to_payload(self.command),
            "message": self.message,
        }
        if self.audio_response:
            payload["audioResponse"] = self.audio_response
        return payload

    def message_html(self) -> str:
        """Message box markup for the front end, with the message escaped."""
        box = "success-box" if self.success else "error-box"
        return f'<div class="{box}"><p>{html.escape(self.message)}</p></div>'
