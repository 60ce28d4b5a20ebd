"""
API Schemas.

This module contains Pydantic models used for API request bodies and response validation.
The protocol endpoint (``POST /``) takes raw JSON; malformed
envelopes are answered with an error envelope instead of an HTTP 422.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class AgentQueryRequest(BaseModel):
    """
    Schema for submitting a query to the agent orchestrator.
    """

    query: str = Field(
        ...,
        min_length=1,
        description="Free-form request for the agent.",
        examples=["Analyze this text: The Model Context Protocol standardizes tool calls."],
    )
    session_id: Optional[str] = Field(
        default=None,
        description="Conversation to continue. A new session is created when omitted or unknown.",
    )


class AgentQueryResponse(BaseModel):
    session_id: str = Field(..., description="Session that holds the conversation history.")
    response: str = Field(..., description="Synthesized answer, or a plain-text error message.")


class ToolCatalogResponse(BaseModel):
    tools: List[Dict[str, Any]] = Field(default_factory=list, description="Registered tools in registration order.")
