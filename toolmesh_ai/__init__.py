"""toolmesh-ai.

This package lets an orchestrating caller invoke named, independently
registered tools through a uniform request/response envelope, and layers an
agentic control loop on top that turns a free-form goal into a sequence of
tool invocations and a synthesized answer.

Core subpackages
----------------

- ``toolmesh_ai.protocol``: envelope codec, tool registry, dispatcher and the
  in-process/HTTP tool clients.
- ``toolmesh_ai.agent_core``: intent analysis, planning, sequential plan
  execution with retries, response synthesis and the LangGraph orchestrator.
- ``toolmesh_ai.tools``: built-in text, search and code tools.
- ``toolmesh_ai.server``: FastAPI transport exposing the dispatcher and the
  orchestrator over HTTP.
- ``toolmesh_ai.core``: shared logging setup and schema base classes.
"""

__version__ = "0.1.0"
