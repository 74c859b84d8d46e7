"""Execution sandbox: runs a buffer through the evaluator registered for its extension."""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional

from pydantic import BaseModel, Field

from webide.core.errors import EvaluationFault
from webide.core.sandbox.evaluators import HostEvaluator
from webide.core.tree.paths import file_extension

logger = logging.getLogger(__name__)

NOT_SUPPORTED = "execution not supported"


class ExecutionResult(BaseModel):
    """Captured output of one run.

    ``error`` carries the fault message; output printed before the fault is
    kept. ``supported`` is False when no evaluator handles the file type,
    which is informational, not a failure.
    """

    output: List[str] = Field(default_factory=list)
    error: Optional[str] = None
    supported: bool = True
    language: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.supported and self.error is None


class ExecutionSandbox:
    def __init__(self, evaluators: Mapping[str, HostEvaluator] | None = None):
        self._evaluators: Dict[str, HostEvaluator] = {
            ext.lower(): evaluator for ext, evaluator in (evaluators or {}).items()
        }

    @property
    def extensions(self) -> List[str]:
        return sorted(self._evaluators)

    def evaluator_for(self, file_name: str) -> Optional[HostEvaluator]:
        return self._evaluators.get(file_extension(file_name))

    def supports(self, file_name: str) -> bool:
        return self.evaluator_for(file_name) is not None

    def language_for(self, file_name: str) -> Optional[str]:
        evaluator = self.evaluator_for(file_name)
        return evaluator.language if evaluator else None

    async def run(self, source: str, file_name: str) -> ExecutionResult:
        """Evaluate ``source`` as the file type of ``file_name``."""
        evaluator = self.evaluator_for(file_name)
        if evaluator is None:
            return ExecutionResult(supported=False, error=NOT_SUPPORTED)

        output: List[str] = []
        logger.debug("Running %s with %r", file_name, evaluator)
        try:
            await evaluator.evaluate(source, output.append)
        except EvaluationFault as exc:
            logger.info("Execution of %s failed: %s", file_name, exc)
            return ExecutionResult(output=list(output), error=str(exc), language=evaluator.language)
        return ExecutionResult(output=list(output), language=evaluator.language)


__all__ = ["ExecutionSandbox", "ExecutionResult", "NOT_SUPPORTED"]
