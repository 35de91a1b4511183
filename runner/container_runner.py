import concurrent.futures
import time
from pathlib import Path
from typing import List, Optional, Sequence

import docker

from judge import config
from judge.constant import CaseOutcome, ENTRY_CLASS, Language
from judge.exception import ExecutorError
from judge.utils import logger
from .base import SandboxExecutor
from .memory_sampler import MemorySampler
from .result import RunResult, classify


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


class ContainerExecutor(SandboxExecutor):
    '''
    Runs every case inside one locked-down container per request.

    The workspace is bind-mounted at `WORKDIR`, the root filesystem is
    read-only, networking is off and memory/CPU are capped. Cases share
    the container; a timeout kills the whole container, so the cases
    after it are reported as aborted.
    '''
    name = 'container'
    WORKDIR = '/app'

    def __init__(
        self,
        client: Optional[docker.APIClient] = None,
        docker_url: str = config.DEFAULT_DOCKER_URL,
        image: str = config.DEFAULT_IMAGE,
        time_limit_ms: int = config.DEFAULT_TIME_LIMIT_MS,
        mem_limit: int = config.DEFAULT_CONTAINER_MEM_LIMIT,
        cpus: float = config.DEFAULT_CONTAINER_CPUS,
        sampler_interval: float = config.DEFAULT_SAMPLER_INTERVAL,
        sampler_stop_timeout: float = config.DEFAULT_SAMPLER_STOP_TIMEOUT,
    ):
        self._client = client
        self.docker_url = docker_url
        self.image = image
        self.time_limit_ms = time_limit_ms
        self.mem_limit = mem_limit
        self.cpus = cpus
        self.sampler_interval = sampler_interval
        self.sampler_stop_timeout = sampler_stop_timeout

    @property
    def client(self) -> docker.APIClient:
        # created on first use, the version handshake needs a live daemon
        if self._client is None:
            self._client = docker.APIClient(base_url=self.docker_url)
        return self._client

    def launch_command(self, args: List[str]) -> List[str]:
        return [
            'java',
            '-cp',
            self.WORKDIR,
            ENTRY_CLASS[Language.JAVA],
            *args,
        ]

    def ensure_image(self) -> bool:
        '''
        Pull the base image unless the daemon already has it.
        Returns whether a pull happened.
        '''
        if self.client.images(name=self.image):
            logger().debug(f'image present, skip pull [image={self.image}]')
            return False
        logger().info(f'pulling image [image={self.image}]')
        self.client.pull(self.image)
        return True

    def create_session(self, workspace: Path) -> str:
        host_config = self.client.create_host_config(
            binds={
                str(workspace): {
                    'bind': self.WORKDIR,
                    'mode': 'rw',
                },
            },
            mem_limit=self.mem_limit,
            memswap_limit=self.mem_limit,
            nano_cpus=int(self.cpus * 1e9),
            read_only=True,
            network_mode='none',
            tmpfs={'/tmp': 'rw,noexec,nosuid'},
        )
        container = self.client.create_container(
            image=self.image,
            command=['/bin/sh'],
            working_dir=self.WORKDIR,
            tty=True,
            stdin_open=True,
            network_disabled=True,
            host_config=host_config,
        )
        container_id = container['Id']
        logger().info(f'created sandbox container [id={container_id[:12]}, '
                      f'workspace={Path(workspace).name}]')
        return container_id

    def run_all(self, workspace: Path,
                inputs: Sequence[str]) -> List[RunResult]:
        if not inputs:
            return []
        container_id = None
        sampler = None
        try:
            self.ensure_image()
            container_id = self.create_session(workspace)
            self.client.start(container_id)
            sampler = MemorySampler(
                client=self.client,
                container_id=container_id,
                interval=self.sampler_interval,
                stop_timeout=self.sampler_stop_timeout,
            )
            sampler.start()
            return self._run_cases(container_id, sampler, inputs)
        except (docker.errors.DockerException, OSError) as e:
            logger().error(f'container backend failure: {e}')
            raise ExecutorError(f'container backend failure: {e}') from e
        finally:
            self.teardown(container_id, sampler)

    def _run_cases(
        self,
        container_id: str,
        sampler: MemorySampler,
        inputs: Sequence[str],
    ) -> List[RunResult]:
        results = []
        killed = False
        pool = concurrent.futures.ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix='container-runner',
        )
        try:
            for i, input_args in enumerate(inputs):
                if killed:
                    results.append(
                        RunResult(
                            outcome=CaseOutcome.ABORTED,
                            time_limit_ms=self.time_limit_ms,
                        ))
                    continue
                result = self._run_case(pool, container_id, sampler,
                                        input_args)
                logger().debug(f'container case done '
                               f'[id={container_id[:12]}, case={i}, '
                               f'outcome={result.outcome.value}, '
                               f'time={result.elapsed_ms}ms, '
                               f'mem={result.peak_memory}]')
                results.append(result)
                killed = result.outcome == CaseOutcome.TIMEOUT
        finally:
            pool.shutdown(wait=False)
        return results

    def _run_case(
        self,
        pool: concurrent.futures.ThreadPoolExecutor,
        container_id: str,
        sampler: MemorySampler,
        input_args: str,
    ) -> RunResult:
        command = self.launch_command(self.split_args(input_args))
        exec_id = self.client.exec_create(
            container_id,
            command,
            stdout=True,
            stderr=True,
            workdir=self.WORKDIR,
        )['Id']
        start = time.perf_counter()
        future = pool.submit(self._collect_output, exec_id)
        try:
            stdout, stderr = future.result(timeout=self.time_limit_ms / 1000)
        except concurrent.futures.TimeoutError:
            elapsed = _elapsed_ms(start)
            logger().info(f'case timed out, killing container '
                          f'[id={container_id[:12]}]')
            self._kill(container_id)
            return RunResult(
                outcome=CaseOutcome.TIMEOUT,
                elapsed_ms=elapsed,
                peak_memory=sampler.peak(),
                time_limit_ms=self.time_limit_ms,
            )
        elapsed = _elapsed_ms(start)
        exit_code = self.client.exec_inspect(exec_id).get('ExitCode')
        stdout, stderr = stdout.strip(), stderr.strip()
        return RunResult(
            outcome=classify(stderr),
            stdout=stdout,
            stderr=stderr,
            elapsed_ms=elapsed,
            peak_memory=sampler.peak(),
            exit_code=exit_code,
            time_limit_ms=self.time_limit_ms,
        )

    def _collect_output(self, exec_id: str) -> tuple[str, str]:
        stdout, stderr = [], []
        frames = self.client.exec_start(exec_id, stream=True, demux=True)
        for out, err in frames:
            if out:
                stdout.append(out)
            if err:
                stderr.append(err)
        return (
            b''.join(stdout).decode('utf-8', 'replace'),
            b''.join(stderr).decode('utf-8', 'replace'),
        )

    def _kill(self, container_id: str):
        try:
            self.client.kill(container_id)
        except docker.errors.APIError as e:
            # already stopped
            logger().debug(f'kill skipped [id={container_id[:12]}]: {e}')
        except (docker.errors.DockerException, OSError) as e:
            logger().warning(f'failed to kill container '
                             f'[id={container_id[:12]}]: {e}')

    def teardown(
        self,
        container_id: Optional[str],
        sampler: Optional[MemorySampler] = None,
    ):
        if sampler is not None:
            sampler.stop()
        if container_id is None:
            return
        self._kill(container_id)
        try:
            self.client.remove_container(container_id, v=True, force=True)
        except (docker.errors.DockerException, OSError) as e:
            logger().warning(f'failed to remove container '
                             f'[id={container_id[:12]}]: {e}')
            return
        logger().info(f'removed sandbox container [id={container_id[:12]}]')
