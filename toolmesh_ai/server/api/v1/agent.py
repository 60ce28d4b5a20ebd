"""
Agent Endpoints.

Submit free-form queries to the orchestrator. Conversation history is kept per
session in the application's ``SessionStore``.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from toolmesh_ai.agent_core.context import SessionStore
from toolmesh_ai.agent_core.orchestrator import Orchestrator
from toolmesh_ai.core.logging_config import get_logger

from ...dependencies import get_orchestrator, get_session_store
from ...schemas import AgentQueryRequest, AgentQueryResponse

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/query",
    response_model=AgentQueryResponse,
    summary="Submit Query",
    description="Run the analyze, plan, execute and synthesize loop for a query.",
    response_description="The session id and the synthesized response.",
)
async def submit_query(
    body: AgentQueryRequest,
    orchestrator: Orchestrator = Depends(get_orchestrator),
    sessions: SessionStore = Depends(get_session_store),
) -> AgentQueryResponse:
    """
    Process a query within a session.

    The response is always a string: failures inside the loop are reported as a
    plain-text error message, never as an HTTP error.
    """
    session_id, context = sessions.get_or_create(body.session_id)
    logger.info(f"Processing query for session {session_id}")
    response = await orchestrator.process_query(body.query, context=context)
    return AgentQueryResponse(session_id=session_id, response=response)


@router.delete(
    "/sessions/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Drop Session",
    description="Forget the conversation history of a session.",
)
async def drop_session(session_id: str, sessions: SessionStore = Depends(get_session_store)) -> None:
    if not sessions.drop(session_id):
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
