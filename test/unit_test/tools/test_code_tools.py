from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest

from toolmesh_ai.protocol.dispatcher import Dispatcher
from toolmesh_ai.protocol.envelope import build_request
from toolmesh_ai.protocol.registry import ToolRegistry
from toolmesh_ai.tools.code import AnalyzeCodeTool, ExecuteCodeTool, GeneratePlanTool

pytestmark = pytest.mark.asyncio


async def test_generate_plan_base_steps() -> None:
    result = await GeneratePlanTool()({"task": "a todo app"})

    assert [s["action"] for s in result["plan"]] == [
        "analyzeProblem",
        "createSolution",
        "implementSolution",
        "testSolution",
        "refineAndDeploy",
    ]
    assert [s["id"] for s in result["plan"]] == [1, 2, 3, 4, 5]
    assert result["requirements"] == []


async def test_generate_plan_adds_conditional_steps_and_renumbers() -> None:
    result = await GeneratePlanTool()(
        {"task": "secure REST API with a database", "requirements": ["fast", "cheap"]}
    )

    actions = [s["action"] for s in result["plan"]]
    assert actions == [
        "analyzeProblem",
        "createSolution",
        "validateRequirements",
        "designDatabaseSchema",
        "securityAudit",
        "designAPI",
        "implementSolution",
        "testSolution",
        "refineAndDeploy",
    ]
    assert [s["id"] for s in result["plan"]] == list(range(1, 10))
    assert "fast, cheap" in result["plan"][2]["description"]


async def test_analyze_python_code() -> None:
    code = (
        "import os\n"
        "from typing import Any, Dict\n"
        "# helper\n"
        "class Greeter:\n"
        "    def greet(self):\n"
        "        return 'hi'\n"
        "\n"
        "async def main():\n"
        "    pass\n"
    )

    result = await AnalyzeCodeTool()({"code": code})

    metrics = result["metrics"]
    assert metrics["linesOfCode"] == 8
    assert metrics["comments"] == 1
    assert metrics["classCount"] == 1
    assert metrics["functionCount"] == 2
    assert metrics["importCount"] == 2
    assert {"source": "typing", "defaultImport": None, "namedImports": ["Any", "Dict"]} in result["imports"]


async def test_analyze_javascript_code() -> None:
    code = "import { a, b } from 'lib';\n// note\nfunction f() {}\nconst g = (x) => x;\nclass K {}\n"

    result = await AnalyzeCodeTool()({"code": code, "language": "javascript"})

    assert [f["name"] for f in result["functions"]] == ["f", "g"]
    assert result["classes"] == [{"name": "K"}]
    assert result["imports"] == [{"source": "lib", "defaultImport": None, "namedImports": ["a", "b"]}]


async def test_analyze_code_rejects_syntax_errors_and_unknown_languages() -> None:
    with pytest.raises(ValueError, match="does not parse"):
        await AnalyzeCodeTool()({"code": "def (:"})
    with pytest.raises(ValueError, match="Unsupported language"):
        await AnalyzeCodeTool()({"code": "x", "language": "cobol"})


@pytest.mark.skipif(sys.platform.startswith("win"), reason="subprocess semantics differ on Windows")
async def test_execute_code_runs_python() -> None:
    result = await ExecuteCodeTool(timeout_seconds=30)({"language": "python", "code": "print(6 * 7)"})

    assert result["output"] == "42"
    assert result["errors"] is None
    assert result["exitCode"] == 0


async def test_execute_code_reports_stderr() -> None:
    result = await ExecuteCodeTool(timeout_seconds=30)({"language": "python", "code": "raise SystemExit('bad')"})

    assert result["exitCode"] == 1
    assert result["errors"] == ["bad"]


async def test_execute_code_rejects_other_languages() -> None:
    with pytest.raises(ValueError, match="Unsupported language"):
        await ExecuteCodeTool()({"language": "javascript", "code": "1"})


async def test_execute_code_timeout() -> None:
    with pytest.raises(RuntimeError, match="timed out"):
        await ExecuteCodeTool(timeout_seconds=0.5)({"language": "python", "code": "import time; time.sleep(10)"})


async def test_dispatcher_timeout_kills_the_child_process(tmp_path: Path) -> None:
    marker = tmp_path / "finished"
    registry = ToolRegistry()
    registry.register_tool(ExecuteCodeTool(timeout_seconds=10))
    dispatcher = Dispatcher(registry, timeout_seconds=0.5)
    code = f"import time; time.sleep(2); open({str(marker)!r}, 'w').close()"

    res = await dispatcher.dispatch(build_request("executeCode", {"language": "python", "code": code}))

    assert res["status"] == "error"
    assert "timed out after 0.5s" in res["error"]
    await asyncio.sleep(3)
    assert not marker.exists()
