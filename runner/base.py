import abc
from pathlib import Path
from typing import List, Sequence

from .result import RunResult


class SandboxExecutor(abc.ABC):
    '''
    Runs the compiled artifact of one workspace once per input.

    Results come back in input order. Implementations raise
    `judge.exception.ExecutorError` when the isolation backend itself
    fails; user-code failures are reported through `RunResult`.
    '''
    name = 'base'

    @abc.abstractmethod
    def run_all(self, workspace: Path,
                inputs: Sequence[str]) -> List[RunResult]:
        ...

    @staticmethod
    def split_args(input_args: str) -> List[str]:
        return input_args.split()
