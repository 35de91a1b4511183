from dataclasses import dataclass
from typing import Optional

from judge.constant import CaseOutcome

TIMEOUT_MESSAGE = 'Time limit exceeded ({} ms)'
ABORTED_MESSAGE = 'Not executed: sandbox session was terminated by an earlier timeout'


@dataclass(frozen=True)
class RunResult:
    outcome: CaseOutcome
    stdout: str = ''
    stderr: str = ''
    elapsed_ms: int = 0
    peak_memory: Optional[int] = None  # bytes
    exit_code: Optional[int] = None
    time_limit_ms: Optional[int] = None

    @property
    def executed(self) -> bool:
        return self.outcome != CaseOutcome.ABORTED

    @property
    def error_message(self) -> str:
        if self.stderr:
            return self.stderr
        if self.outcome == CaseOutcome.TIMEOUT:
            return TIMEOUT_MESSAGE.format(self.time_limit_ms)
        if self.outcome == CaseOutcome.ABORTED:
            return ABORTED_MESSAGE
        return ''


def classify(stderr: str) -> CaseOutcome:
    # exit_code is kept on RunResult for diagnostics only
    if stderr:
        return CaseOutcome.RUNTIME_ERROR
    return CaseOutcome.SUCCESS
