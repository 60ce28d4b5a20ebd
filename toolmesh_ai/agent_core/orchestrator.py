from __future__ import annotations

"""LangGraph control loop.

``Orchestrator`` runs one graph invocation per caller query:

``analyze -> plan -> execute (one node visit per step) -> synthesize``

Every stage owns a fallback, so a completion glitch or a failing tool never
aborts the run. ``process_query`` additionally catches anything that still
escapes and turns it into a plain-text error message.
"""

import logging
from typing import Any, Dict, List, NotRequired, Optional, Required, TypedDict

from langgraph.graph import END, StateGraph

from toolmesh_ai.protocol.client import ToolClient

from .analysis import TaskAnalyzer
from .completion import CompletionService
from .context import ConversationContext
from .planning import TaskPlanner
from .runtime import PlanExecutor
from .runtime.retry import Sleep
from .schemas.config import OrchestratorConfig
from .schemas.domain import Phase, Plan, StepResult, TaskAnalysis, TurnRole
from .synthesis import ResponseSynthesizer

logger = logging.getLogger(__name__)

ERROR_RESPONSE_PREFIX = "An error occurred while processing the query"

# Graph super-steps outside the per-step execute loop, plus headroom.
_GRAPH_OVERHEAD_STEPS = 10


class _QueryState(TypedDict):
    """Mutable LangGraph state for a single query.

    ``idx`` is the index of the next plan step to execute; ``results`` holds
    one ``StepResult`` per executed step in plan order.
    """

    query: Required[str]
    phase: Required[Phase]
    idx: Required[int]
    results: Required[List[StepResult]]
    analysis: NotRequired[TaskAnalysis]
    plan: NotRequired[Plan]
    response: NotRequired[str]


class Orchestrator:
    """Analyze, plan, execute and synthesize a response for each query."""

    def __init__(
        self,
        *,
        client: ToolClient,
        completion: Optional[CompletionService] = None,
        config: Optional[OrchestratorConfig] = None,
        context: Optional[ConversationContext] = None,
        sleep: Optional[Sleep] = None,
    ) -> None:
        """
        Args:
            client: Tool client used for every plan step and for catalog discovery.
            completion: Optional completion service. When ``None`` every stage uses its deterministic fallback.
            config: Retry, history and plan limits.
            context: Default conversation context used when ``process_query`` gets none.
            sleep: Awaitable used between retry attempts (``asyncio.sleep`` by default).
        """
        self._config = config or OrchestratorConfig()
        self._client = client
        self._completion = completion
        self._context = context or ConversationContext(self._config.history_limit)
        self._available_tools: List[Dict[str, Any]] = []

        max_tokens = self._config.completion_max_tokens
        self._analyzer = TaskAnalyzer(completion, max_tokens=max_tokens)
        self._planner = TaskPlanner(completion, max_steps=self._config.max_plan_steps, max_tokens=max_tokens)
        self._executor = PlanExecutor(
            client,
            max_retries=self._config.max_retries,
            retry_delay_seconds=self._config.retry_delay_seconds,
            sleep=sleep,
        )
        self._synthesizer = ResponseSynthesizer(completion, max_tokens=max_tokens)
        self._graph = self._build_graph()

    @property
    def context(self) -> ConversationContext:
        return self._context

    @property
    def config(self) -> OrchestratorConfig:
        return self._config

    @property
    def available_tools(self) -> List[Dict[str, Any]]:
        return list(self._available_tools)

    def _build_graph(self):
        """Build and compile the LangGraph state machine."""
        g: StateGraph = StateGraph(_QueryState)
        g.add_node("analyze", self._node_analyze)
        g.add_node("plan", self._node_plan)
        g.add_node("execute", self._node_execute_next)
        g.add_node("synthesize", self._node_synthesize)

        g.set_entry_point("analyze")
        g.add_edge("analyze", "plan")
        g.add_conditional_edges(
            "plan",
            self._route_after_plan,
            {"execute": "execute", "synthesize": "synthesize"},
        )
        g.add_conditional_edges(
            "execute",
            self._route_after_execute,
            {"continue": "execute", "synthesize": "synthesize"},
        )
        g.add_edge("synthesize", END)
        return g.compile()

    async def process_query(self, query: str, *, context: Optional[ConversationContext] = None) -> str:
        """Answer ``query``; never raises.

        The user turn is recorded before the run and the assistant turn after a
        successful run.
        """
        ctx = context if context is not None else self._context
        try:
            ctx.append(TurnRole.user, query)
            state: _QueryState = {"query": query, "phase": Phase.idle, "idx": 0, "results": []}
            final = await self._graph.ainvoke(
                state,
                config={"recursion_limit": self._config.max_plan_steps + _GRAPH_OVERHEAD_STEPS},
            )
            response = final["response"]
            ctx.append(TurnRole.assistant, response)
            return response
        except Exception as exc:
            logger.exception("Query processing failed")
            return f"{ERROR_RESPONSE_PREFIX}: {exc}"

    async def load_available_tools(self) -> List[Dict[str, Any]]:
        """Fetch the tool catalog through the client and use it for planning prompts.

        Failures are logged and the current catalog is kept.
        """
        try:
            tools = await self._client.get_available_tools()
        except Exception as exc:
            logger.warning(f"Could not load tool catalog, keeping defaults: {exc}")
            return self.available_tools
        names = [t["name"] for t in tools if isinstance(t, dict) and isinstance(t.get("name"), str)]
        self._available_tools = [t for t in tools if isinstance(t, dict)]
        if names:
            self._planner.set_tool_catalog(names)
        logger.info(f"Loaded {len(names)} tools")
        return self.available_tools

    def reset_context(self) -> None:
        self._context.reset()

    async def _node_analyze(self, state: _QueryState) -> Dict[str, Any]:
        logger.debug("Phase %s", Phase.analyzing.value)
        analysis = await self._analyzer.analyze(state["query"])
        logger.info(f"Query classified as '{analysis.type.value}'")
        return {"phase": Phase.analyzing, "analysis": analysis}

    async def _node_plan(self, state: _QueryState) -> Dict[str, Any]:
        logger.debug("Phase %s", Phase.planning.value)
        plan = await self._planner.plan(state["analysis"])
        logger.info(f"Plan has {len(plan.steps)} step(s): {[s.action for s in plan.steps]}")
        return {"phase": Phase.planning, "plan": plan, "idx": 0, "results": []}

    def _route_after_plan(self, state: _QueryState) -> str:
        return "execute" if state["plan"].steps else "synthesize"

    async def _node_execute_next(self, state: _QueryState) -> Dict[str, Any]:
        """Execute exactly one plan step at ``idx``."""
        step = state["plan"].steps[state["idx"]]
        result = await self._executor.execute_step(step)
        return {
            "phase": Phase.executing,
            "idx": state["idx"] + 1,
            "results": [*state["results"], result],
        }

    def _route_after_execute(self, state: _QueryState) -> str:
        return "continue" if state["idx"] < len(state["plan"].steps) else "synthesize"

    async def _node_synthesize(self, state: _QueryState) -> Dict[str, Any]:
        logger.debug("Phase %s", Phase.synthesizing.value)
        response = await self._synthesizer.synthesize(state["query"], state["results"])
        return {"phase": Phase.idle, "response": response}
