import concurrent.futures
import os
import signal
import subprocess
import time
from pathlib import Path
from typing import List, Sequence

from judge import config
from judge.constant import CaseOutcome, ENTRY_CLASS, Language
from judge.exception import ExecutorError
from judge.utils import logger
from .base import SandboxExecutor
from .result import RunResult, classify

# how long to wait for pipes to drain after a forced kill
KILL_GRACE_SEC = 1.0


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _terminate_tree(proc: subprocess.Popen):
    try:
        if os.name == 'posix':
            os.killpg(proc.pid, signal.SIGKILL)
        else:
            proc.kill()
    except ProcessLookupError:
        pass


class HostProcessExecutor(SandboxExecutor):
    '''
    Runs every case as a child process of the sandbox host.

    Waits go through a single-worker pool so exactly one case is ever in
    flight, which keeps the forced kill on timeout unambiguous. The host
    has no memory instrumentation, `peak_memory` is always None.
    '''
    name = 'host'

    def __init__(
        self,
        time_limit_ms: int = config.DEFAULT_TIME_LIMIT_MS,
        heap_limit: str = config.DEFAULT_HOST_HEAP_LIMIT,
        java: str = 'java',
    ):
        self.time_limit_ms = time_limit_ms
        self.heap_limit = heap_limit
        self.java = java

    def launch_command(self, workspace: Path, args: List[str]) -> List[str]:
        return [
            self.java,
            f'-Xmx{self.heap_limit}',
            '-Dfile.encoding=UTF-8',
            '-cp',
            str(workspace),
            ENTRY_CLASS[Language.JAVA],
            *args,
        ]

    def run_all(self, workspace: Path,
                inputs: Sequence[str]) -> List[RunResult]:
        results = []
        pool = self._new_pool()
        try:
            for i, input_args in enumerate(inputs):
                result, drained = self._run_case(pool, workspace, input_args)
                logger().debug(f'host case done [workspace={workspace.name}, '
                               f'case={i}, outcome={result.outcome.value}, '
                               f'time={result.elapsed_ms}ms]')
                results.append(result)
                if not drained:
                    # the killed process left its wait stuck, the slot is lost
                    pool.shutdown(wait=False)
                    pool = self._new_pool()
        finally:
            pool.shutdown(wait=False)
        return results

    @staticmethod
    def _new_pool() -> concurrent.futures.ThreadPoolExecutor:
        return concurrent.futures.ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix='host-runner',
        )

    def _run_case(
        self,
        pool: concurrent.futures.ThreadPoolExecutor,
        workspace: Path,
        input_args: str,
    ) -> tuple[RunResult, bool]:
        command = self.launch_command(workspace, self.split_args(input_args))
        start = time.perf_counter()
        try:
            proc = subprocess.Popen(
                command,
                cwd=str(workspace),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                errors='replace',
                start_new_session=True,
            )
        except OSError as e:
            raise ExecutorError(f'failed to spawn {command[0]}: {e}') from e
        future = pool.submit(proc.communicate)
        try:
            stdout, stderr = future.result(timeout=self.time_limit_ms / 1000)
        except concurrent.futures.TimeoutError:
            _terminate_tree(proc)
            elapsed = _elapsed_ms(start)
            logger().info(f'case timed out, process killed [pid={proc.pid}]')
            try:
                future.result(timeout=KILL_GRACE_SEC)
                drained = True
            except concurrent.futures.TimeoutError:
                drained = False
            return RunResult(
                outcome=CaseOutcome.TIMEOUT,
                elapsed_ms=elapsed,
                exit_code=proc.poll(),
                time_limit_ms=self.time_limit_ms,
            ), drained
        elapsed = _elapsed_ms(start)
        stdout, stderr = stdout.strip(), stderr.strip()
        return RunResult(
            outcome=classify(stderr),
            stdout=stdout,
            stderr=stderr,
            elapsed_ms=elapsed,
            exit_code=proc.returncode,
            time_limit_ms=self.time_limit_ms,
        ), True
