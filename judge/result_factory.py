"""
Factory functions for responses that never reach the aggregation step.
"""

from .compiler import CompileResult
from .constant import ExecutionStatus
from .meta import ExecutionResponse


def make_compile_failure(result: CompileResult) -> ExecutionResponse:
    """
    Build the response for a submission that failed to compile.

    The compiler diagnostic is passed through verbatim; javac reports on
    stderr, stdout is only a fallback.
    """
    return ExecutionResponse(
        status=ExecutionStatus.COMPILE_FAILURE,
        message=result.stderr or result.stdout,
    )


def make_infra_failure(message: str) -> ExecutionResponse:
    """
    Build the response for a sandbox-side failure (workspace, toolchain,
    container runtime). These reflect platform health, not the submission.
    """
    return ExecutionResponse(
        status=ExecutionStatus.INFRA_FAILURE,
        message=message,
    )
