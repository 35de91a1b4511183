import time

import pytest

from judge.constant import CaseOutcome
from judge.exception import ExecutorError
from runner.host_runner import HostProcessExecutor
from tests.programs import (
    EXIT_ON_A_PROGRAM,
    LOOP_ON_ZERO_PROGRAM,
    RAISE_ON_NEGATIVE_PROGRAM,
    SUM_PROGRAM,
    write_program,
)


def test_launch_command_caps_jvm_heap(workspace):
    executor = HostProcessExecutor(heap_limit='128m')
    command = executor.launch_command(workspace, ['4', '4'])
    assert command[0] == 'java'
    assert '-Xmx128m' in command
    assert command[command.index('-cp') + 1] == str(workspace)
    assert command[-3:] == ['Main', '4', '4']


def test_sum_of_two_integers(workspace, TestHostExecutor):
    write_program(workspace, SUM_PROGRAM)
    results = TestHostExecutor().run_all(workspace, ['4 4', '1 3'])
    assert [r.stdout for r in results] == ['8', '4']
    assert all(r.outcome == CaseOutcome.SUCCESS for r in results)
    assert all(r.elapsed_ms >= 0 for r in results)
    assert all(r.peak_memory is None for r in results)


def test_arguments_split_on_whitespace(workspace, TestHostExecutor):
    write_program(workspace, SUM_PROGRAM)
    results = TestHostExecutor().run_all(workspace, ['  10   20 '])
    assert results[0].stdout == '30'


def test_stderr_marks_runtime_error_but_keeps_running(
        workspace, TestHostExecutor):
    write_program(workspace, RAISE_ON_NEGATIVE_PROGRAM)
    results = TestHostExecutor().run_all(workspace, ['1 2', '-1 2', '3 4'])
    assert len(results) == 3
    assert results[0].outcome == CaseOutcome.SUCCESS
    assert results[1].outcome == CaseOutcome.RUNTIME_ERROR
    assert 'negative input -1' in results[1].error_message
    # short-circuit is the aggregator's decision, not the executor's
    assert results[2].stdout == '7'


def test_silent_non_zero_exit_is_not_an_error(workspace, TestHostExecutor):
    write_program(workspace, EXIT_ON_A_PROGRAM)
    results = TestHostExecutor().run_all(workspace, ['a', 'b'])
    assert [r.stdout for r in results] == ['a', 'b']
    assert [r.outcome for r in results] == [CaseOutcome.SUCCESS] * 2
    assert [r.exit_code for r in results] == [2, 0]
    assert results[0].error_message == ''


def test_infinite_loop_is_killed_at_deadline(workspace, TestHostExecutor):
    write_program(workspace, LOOP_ON_ZERO_PROGRAM)
    executor = TestHostExecutor(time_limit_ms=500)
    start = time.perf_counter()
    results = executor.run_all(workspace, ['0', '7'])
    wall = time.perf_counter() - start
    assert results[0].outcome == CaseOutcome.TIMEOUT
    assert 500 <= results[0].elapsed_ms < 1500
    assert results[0].error_message == 'Time limit exceeded (500 ms)'
    # the next case still gets a fresh process
    assert results[1].outcome == CaseOutcome.SUCCESS
    assert results[1].stdout == '7'
    assert wall < 5


def test_empty_inputs(workspace, TestHostExecutor):
    write_program(workspace, SUM_PROGRAM)
    assert TestHostExecutor().run_all(workspace, []) == []


def test_spawn_failure_is_executor_error(workspace):
    executor = HostProcessExecutor(java=str(workspace / 'no-such-java'))
    with pytest.raises(ExecutorError):
        executor.run_all(workspace, ['1 2'])
