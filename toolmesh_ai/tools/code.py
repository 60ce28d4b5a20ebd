"""Code tools: implementation plan templates, source metrics and Python execution."""

from __future__ import annotations

import ast
import asyncio
import contextlib
import logging
import re
import sys
from typing import Any, Dict, List

from pydantic import Field

from toolmesh_ai.protocol.registry import BaseTool

from .base import ToolInput

logger = logging.getLogger(__name__)

BASE_PLAN_STEPS = (
    ("analyzeProblem", "Analyze the problem and its requirements"),
    ("createSolution", "Design the solution"),
    ("implementSolution", "Implement the solution"),
    ("testSolution", "Test the solution"),
    ("refineAndDeploy", "Optimize and deploy"),
)

_API_RE = re.compile(r"\b(api|rest|http)\b", re.IGNORECASE)
_DATABASE_RE = re.compile(r"\b(database|db|sql)\b", re.IGNORECASE)
_SECURITY_RE = re.compile(r"\b(security|secure|auth)\b", re.IGNORECASE)


class GeneratePlanInput(ToolInput):
    task: str = Field(..., min_length=1, description="Task to plan")
    requirements: List[str] = Field(default_factory=list, description="Optional requirements")


class AnalyzeCodeInput(ToolInput):
    code: str = Field(..., min_length=1, description="Source code to analyze")
    language: str = Field("python", description="Source language (python or javascript)")


class ExecuteCodeInput(ToolInput):
    language: str = Field(..., min_length=1, description="Programming language; only python is supported")
    code: str = Field(..., min_length=1, description="Code to execute")


class GeneratePlanTool(BaseTool):
    name = "generatePlan"
    description = "Produce a templated implementation plan for a software task"
    input_model = GeneratePlanInput

    async def run(self, params: GeneratePlanInput) -> Dict[str, Any]:
        steps = [{"action": action, "description": text} for action, text in BASE_PLAN_STEPS]
        if params.requirements:
            steps.insert(
                2,
                {
                    "action": "validateRequirements",
                    "description": "Validate against the requirements: " + ", ".join(params.requirements),
                },
            )
        if _API_RE.search(params.task):
            steps.insert(3, {"action": "designAPI", "description": "Design the API interface"})
        if _DATABASE_RE.search(params.task):
            steps.insert(3, {"action": "designDatabaseSchema", "description": "Design the database schema"})
        if _SECURITY_RE.search(params.task):
            steps.insert(4, {"action": "securityAudit", "description": "Run a security audit"})

        return {
            "task": params.task,
            "requirements": list(params.requirements),
            "plan": [{"id": index, **step} for index, step in enumerate(steps, start=1)],
        }


def _python_metrics(code: str) -> Dict[str, Any]:
    tree = ast.parse(code)
    functions = []
    classes = []
    imports = []
    for node in ast.walk(tree):
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            kind = "async-function" if isinstance(node, ast.AsyncFunctionDef) else "function"
            functions.append({"name": node.name, "type": kind, "line": node.lineno})
        elif isinstance(node, ast.ClassDef):
            classes.append({"name": node.name, "line": node.lineno})
        elif isinstance(node, ast.Import):
            for alias in node.names:
                imports.append({"source": alias.name, "defaultImport": alias.asname, "namedImports": []})
        elif isinstance(node, ast.ImportFrom):
            imports.append(
                {
                    "source": "." * node.level + (node.module or ""),
                    "defaultImport": None,
                    "namedImports": [alias.name for alias in node.names],
                }
            )
    return {"functions": functions, "classes": classes, "imports": imports}


_JS_FUNCTION_RE = re.compile(r"function\s+([A-Za-z0-9_]+)\s*\(")
_JS_ARROW_RE = re.compile(r"const\s+([A-Za-z0-9_]+)\s*=\s*(?:\([^)]*\)|[A-Za-z0-9_]+)\s*=>")
_JS_CLASS_RE = re.compile(r"class\s+([A-Za-z0-9_]+)")
_JS_IMPORT_RE = re.compile(r"import\s+(?:{([^}]+)}|\s*([A-Za-z0-9_]+))\s+from\s+['\"]([^'\"]+)['\"]")


def _javascript_metrics(code: str) -> Dict[str, Any]:
    functions = [{"name": m, "type": "function"} for m in _JS_FUNCTION_RE.findall(code)]
    functions += [{"name": m, "type": "arrow-function"} for m in _JS_ARROW_RE.findall(code)]
    classes = [{"name": m} for m in _JS_CLASS_RE.findall(code)]
    imports = [
        {
            "source": source,
            "defaultImport": default or None,
            "namedImports": [item.strip() for item in named.split(",")] if named else [],
        }
        for named, default, source in _JS_IMPORT_RE.findall(code)
    ]
    return {"functions": functions, "classes": classes, "imports": imports}


class AnalyzeCodeTool(BaseTool):
    name = "analyzeCode"
    description = "Report line, comment, function, class and import metrics for source code"
    input_model = AnalyzeCodeInput

    async def run(self, params: AnalyzeCodeInput) -> Dict[str, Any]:
        language = params.language.lower()
        lines = [line.strip() for line in params.code.splitlines()]
        lines_of_code = sum(1 for line in lines if line)
        if language in ("javascript", "js"):
            comments = sum(1 for line in lines if line.startswith(("//", "/*", "*")))
            details = _javascript_metrics(params.code)
        elif language in ("python", "py"):
            comments = sum(1 for line in lines if line.startswith("#"))
            try:
                details = _python_metrics(params.code)
            except SyntaxError as exc:
                raise ValueError(f"Code does not parse: {exc.msg} (line {exc.lineno})") from exc
        else:
            raise ValueError(f"Unsupported language: {params.language}")

        return {
            "language": language,
            "metrics": {
                "linesOfCode": lines_of_code,
                "comments": comments,
                "commentRatio": round(comments / lines_of_code, 2) if lines_of_code else 0,
                "functionCount": len(details["functions"]),
                "classCount": len(details["classes"]),
                "importCount": len(details["imports"]),
            },
            **details,
        }


class ExecuteCodeTool(BaseTool):
    """Run Python code in an isolated interpreter subprocess."""

    name = "executeCode"
    description = "Execute Python code in a subprocess and return its output"
    input_model = ExecuteCodeInput

    def __init__(self, *, timeout_seconds: float = 10.0) -> None:
        self._timeout = timeout_seconds

    async def run(self, params: ExecuteCodeInput) -> Dict[str, Any]:
        if params.language.lower() not in ("python", "py", "python3"):
            raise ValueError(f"Unsupported language: {params.language}. Only python is supported.")

        proc = await asyncio.create_subprocess_exec(
            sys.executable,
            "-I",
            "-c",
            params.code,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self._timeout)
        except asyncio.TimeoutError as exc:
            raise RuntimeError(f"Code execution timed out after {self._timeout}s") from exc
        finally:
            # also reached on cancellation, e.g. a dispatcher timeout
            if proc.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    proc.kill()
                await proc.wait()

        output = stdout.decode("utf-8", errors="replace").rstrip("\n")
        errors = stderr.decode("utf-8", errors="replace").strip()
        logger.debug(f"executeCode finished with exit code {proc.returncode}")
        return {
            "language": "python",
            "output": output or None,
            "errors": [errors] if errors else None,
            "exitCode": proc.returncode,
        }
