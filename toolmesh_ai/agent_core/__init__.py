"""Agent core: the analyze, plan, execute and synthesize control loop.

Design overview
---------------

- ``analysis`` classifies a query into a ``TaskAnalysis``.
- ``planning`` turns the analysis into an ordered ``Plan``.
- ``runtime`` executes plan steps sequentially through a tool client with
  bounded fixed-delay retries.
- ``synthesis`` turns step results into the final answer.
- ``orchestrator`` wires the stages into a LangGraph state machine.

Each completion-driven stage has a deterministic fallback, so the loop works
without any completion service configured.

Typical usage
-------------

.. code-block:: python

    from toolmesh_ai.agent_core.factory import build_orchestrator

    orchestrator = build_orchestrator(model="openai:gpt-4o")
    answer = await orchestrator.process_query("Analyze this text: ...")
"""
