from typing import Iterable, Optional

from runner.result import RunResult
from .constant import ExecutionStatus
from .meta import ExecutionResponse, JudgeInfo


def _max(current: Optional[int], value: Optional[int]) -> Optional[int]:
    if value is None:
        return current
    if current is None:
        return value
    return max(current, value)


def aggregate(results: Iterable[RunResult]) -> ExecutionResponse:
    '''
    Fold per-case results into one response.

    Outputs stop at the first case carrying an error message; that
    message becomes the response message. Time and memory are the
    maxima over every case that actually ran, the failing one included.
    '''
    status = ExecutionStatus.SUCCESS
    message = ''
    outputs = []
    max_time = None
    max_memory = None
    for result in results:
        if result.executed:
            max_time = _max(max_time, result.elapsed_ms)
            max_memory = _max(max_memory, result.peak_memory)
        error = result.error_message
        if error:
            status = ExecutionStatus.RUNTIME_FAILURE
            message = error
            break
        outputs.append(result.stdout)
    return ExecutionResponse(
        status=status,
        outputList=outputs,
        message=message,
        judgeInfo=JudgeInfo(time=max_time, memory=max_memory),
    )
