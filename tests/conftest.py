import sys
import pytest
from unittest.mock import MagicMock
from runner.host_runner import HostProcessExecutor


@pytest.fixture
def workspace(tmp_path):
    ws = tmp_path / 'workspace'
    ws.mkdir()
    return ws


@pytest.fixture
def TestHostExecutor():
    '''
    Host executor launching `main.py` with the current interpreter instead
    of a JVM, so the runner is exercised with real child processes.
    '''

    class TestHostExecutor(HostProcessExecutor):

        def launch_command(self, workspace, args):
            return [sys.executable, str(workspace / 'main.py'), *args]

    return TestHostExecutor


@pytest.fixture
def mock_docker_client():
    client = MagicMock()
    client.images.return_value = [{'Id': 'sha256:abc'}]
    client.create_host_config.return_value = {}
    client.create_container.return_value = {'Id': 'container-0123456789ab'}
    client.exec_create.return_value = {'Id': 'exec-1'}
    client.exec_inspect.return_value = {'ExitCode': 0}
    client.stats.return_value = {'memory_stats': {'usage': 1024}}
    return client
