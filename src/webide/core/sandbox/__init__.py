"""
Execution sandbox.

Components:
- HostEvaluator: evaluates source text and emits printed lines
- SubprocessEvaluator: evaluator running an interpreter in its own process
- ExecutionSandbox: picks the evaluator for a file extension and captures output
- ExecutionResult: output lines plus the optional fault message
"""

from webide.core.sandbox.evaluators import HostEvaluator, SubprocessEvaluator, extract_error
from webide.core.sandbox.runner import NOT_SUPPORTED, ExecutionResult, ExecutionSandbox

__all__ = [
    "HostEvaluator",
    "SubprocessEvaluator",
    "ExecutionSandbox",
    "ExecutionResult",
    "NOT_SUPPORTED",
    "extract_error",
]
