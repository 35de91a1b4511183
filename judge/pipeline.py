import time
from pathlib import Path
from typing import Optional

from runner.base import SandboxExecutor
from runner.container_runner import ContainerExecutor
from runner.host_runner import HostProcessExecutor
from . import file_manager
from .aggregator import aggregate
from .compiler import compile_source
from .constant import Backend
from .exception import SandboxError
from .meta import ExecutionRequest, ExecutionResponse
from .result_factory import make_compile_failure, make_infra_failure
from .utils import logger


def build_executor(cfg: dict) -> SandboxExecutor:
    backend = Backend(cfg.get('backend', Backend.CONTAINER))
    if backend == Backend.HOST:
        return HostProcessExecutor(
            time_limit_ms=cfg['time_limit_ms'],
            heap_limit=cfg['host_heap_limit'],
        )
    return ContainerExecutor(
        docker_url=cfg['docker_url'],
        image=cfg['image'],
        time_limit_ms=cfg['time_limit_ms'],
        mem_limit=cfg['container_mem_limit'],
        cpus=cfg['container_cpus'],
        sampler_interval=cfg['sampler_interval'],
        sampler_stop_timeout=cfg['sampler_stop_timeout'],
    )


class CodeSandbox:
    '''
    stage -> compile -> run -> aggregate, with the workspace released on
    every path. Always answers with a well-formed `ExecutionResponse`.
    '''

    def __init__(
        self,
        executor: SandboxExecutor,
        workspace_root: Optional[Path] = None,
        compile_timeout_ms: Optional[int] = None,
    ):
        self.executor = executor
        self.workspace_root = workspace_root
        self.compile_timeout_ms = compile_timeout_ms

    @classmethod
    def from_config(cls, cfg: dict) -> 'CodeSandbox':
        return cls(
            executor=build_executor(cfg),
            workspace_root=Path(cfg['workspace_root']),
            compile_timeout_ms=cfg.get('compile_timeout_ms'),
        )

    def execute(self, request: ExecutionRequest) -> ExecutionResponse:
        start = time.perf_counter()
        workspace = None
        try:
            workspace = file_manager.stage(
                request.code,
                language=request.language,
                root_dir=self.workspace_root,
            )
            compile_result = compile_source(
                workspace,
                language=request.language,
                timeout_ms=self.compile_timeout_ms,
            )
            if not compile_result.success:
                return make_compile_failure(compile_result)
            results = self.executor.run_all(workspace, request.inputList)
            return aggregate(results)
        except SandboxError as e:
            logger().error(f'sandbox failure [backend={self.executor.name}]: '
                           f'{e}')
            return make_infra_failure(str(e))
        except Exception as e:
            logger().exception('unexpected sandbox failure')
            return make_infra_failure(f'unexpected sandbox failure: {e}')
        finally:
            file_manager.release(workspace)
            logger().info(f'request finished [backend={self.executor.name}, '
                          f'cases={len(request.inputList)}, '
                          f'total={int((time.perf_counter() - start) * 1000)}ms]')
