import threading
from typing import Optional

import docker

from judge import config
from judge.utils import logger


class MemorySampler:
    '''
    Track the peak memory usage of a running container.

    A daemon thread takes a one-shot stats snapshot every `interval`
    seconds and keeps the largest usage seen. Short cases may finish
    between two polls, so the peak is a best-effort figure.
    '''

    def __init__(
        self,
        client: docker.APIClient,
        container_id: str,
        interval: float = config.DEFAULT_SAMPLER_INTERVAL,
        stop_timeout: float = config.DEFAULT_SAMPLER_STOP_TIMEOUT,
    ):
        self.client = client
        self.container_id = container_id
        self.interval = interval
        self.stop_timeout = stop_timeout
        self._peak = 0
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and not self._stop_event.is_set()

    def peak(self) -> int:
        return self._peak

    def start(self):
        if self._thread is not None:
            raise RuntimeError('sampler already started')
        self._thread = threading.Thread(
            target=self._loop,
            name=f'mem-sampler-{self.container_id[:12]}',
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> bool:
        '''
        Stop sampling and wait at most `stop_timeout` seconds for the
        thread. Returns whether the thread actually exited; a thread that
        did not is left behind as a daemon.
        '''
        self._stop_event.set()
        if self._thread is None:
            return True
        self._thread.join(self.stop_timeout)
        if self._thread.is_alive():
            logger().warning(
                f'memory sampler did not exit in {self.stop_timeout}s, '
                f'abandoned [container={self.container_id[:12]}]')
            return False
        return True

    def _loop(self):
        while not self._stop_event.is_set():
            try:
                stats = self.client.stats(
                    self.container_id,
                    stream=False,
                    one_shot=True,
                )
            except docker.errors.InvalidVersion as e:
                # one-shot stats needs engine API 1.41+
                logger().warning(f'memory sampling unsupported by daemon '
                                 f'[container={self.container_id[:12]}]: {e}')
                return
            except (docker.errors.DockerException, OSError) as e:
                logger().debug(f'memory sampling ended '
                               f'[container={self.container_id[:12]}]: {e}')
                return
            self._record(stats)
            self._stop_event.wait(self.interval)

    def _record(self, stats: dict | None):
        memory_stats = (stats or {}).get('memory_stats') or {}
        # max_usage is only reported on cgroup v1 hosts
        observed = max(
            memory_stats.get('usage') or 0,
            memory_stats.get('max_usage') or 0,
        )
        if observed > self._peak:
            self._peak = observed
