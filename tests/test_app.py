import pytest

import app as sandbox_app
from judge.constant import ExecutionStatus
from judge.meta import ExecutionResponse, JudgeInfo


class StubSandbox:
    '''Records requests and answers with a canned response.'''

    def __init__(self, response):
        self.response = response
        self.requests = []
        self.executor = type('Executor', (), {'name': 'host'})()

    def execute(self, request):
        self.requests.append(request)
        return self.response


@pytest.fixture
def stub_sandbox(monkeypatch):
    sandbox = StubSandbox(
        ExecutionResponse(
            status=ExecutionStatus.SUCCESS,
            outputList=['8', '4'],
            judgeInfo=JudgeInfo(time=12, memory=None),
        ))
    monkeypatch.setattr(sandbox_app, 'SANDBOX', sandbox)
    monkeypatch.setattr(sandbox_app, 'SANDBOX_TOKEN', '')
    return sandbox


@pytest.fixture
def client():
    sandbox_app.app.config['TESTING'] = True
    with sandbox_app.app.test_client() as c:
        yield c


def test_health(client):
    rv = client.get('/health')
    assert rv.status_code == 200
    assert rv.data == b'ok'


def test_execute_returns_envelope(client, stub_sandbox):
    rv = client.post('/execute',
                     json={
                         'language': 'java',
                         'code': 'public class Main {}',
                         'inputList': ['4 4', '1 3'],
                     })
    assert rv.status_code == 200
    body = rv.get_json()
    assert body['status'] == 'ok'
    assert body['data'] == {
        'status': 'SUCCESS',
        'outputList': ['8', '4'],
        'message': '',
        'judgeInfo': {
            'time': 12,
            'memory': None,
        },
    }
    assert stub_sandbox.requests[0].inputList == ['4 4', '1 3']


def test_execute_defaults_to_no_inputs(client, stub_sandbox):
    rv = client.post('/execute', json={'language': 'JAVA', 'code': 'x'})
    assert rv.status_code == 200
    assert stub_sandbox.requests[0].inputList == []


@pytest.mark.parametrize('payload', [
    {
        'language': 'cobol',
        'code': 'x'
    },
    {
        'language': 'java',
        'code': '   '
    },
    {
        'code': 'x'
    },
    {
        'language': 'java',
        'code': 'x',
        'inputList': 'not a list'
    },
])
def test_execute_rejects_invalid_request(client, stub_sandbox, payload):
    rv = client.post('/execute', json=payload)
    assert rv.status_code == 400
    assert rv.get_json()['status'] == 'err'
    assert stub_sandbox.requests == []


def test_execute_rejects_non_json(client, stub_sandbox):
    rv = client.post('/execute', data='language=java')
    assert rv.status_code == 400
    assert stub_sandbox.requests == []


def test_execute_checks_token(client, stub_sandbox, monkeypatch):
    monkeypatch.setattr(sandbox_app, 'SANDBOX_TOKEN', 'secret')
    payload = {'language': 'java', 'code': 'x'}
    rv = client.post('/execute', json=payload)
    assert rv.status_code == 403
    rv = client.post('/execute',
                     json=payload,
                     headers={'X-Sandbox-Token': 'wrong'})
    assert rv.status_code == 403
    rv = client.post('/execute',
                     json=payload,
                     headers={'X-Sandbox-Token': 'secret'})
    assert rv.status_code == 200
    assert len(stub_sandbox.requests) == 1


def test_status_hides_limits_without_token(client, stub_sandbox,
                                           monkeypatch):
    monkeypatch.setattr(sandbox_app, 'SANDBOX_TOKEN', 'secret')
    rv = client.get('/status')
    assert rv.get_json() == {'backend': 'host'}
    rv = client.get('/status?token=secret')
    body = rv.get_json()
    assert body['backend'] == 'host'
    assert body['timeLimitMs'] == sandbox_app.SANDBOX_CONFIG['time_limit_ms']
