"""
Test suite for BatchRunner ordering and partial-failure semantics.
"""

import asyncio

import pytest

from document_operations import (
    BatchRunner,
    ErrorKind,
    OperationTimer,
    ResponseCode,
    ResultEnvelope,
)


async def echo_after_delay(value):
    """Succeed with the value as body, finishing later for smaller values."""
    await asyncio.sleep(0.001 * (10 - value))
    return ResultEnvelope.success(ResponseCode.SUCCESS_CREATE, body=str(value))


async def fail_on_odd(value):
    if value % 2:
        raise RuntimeError(f"odd value {value}")
    return ResultEnvelope.success(ResponseCode.SUCCESS_CREATE, body=str(value))


class TestBatchRunnerOrdering:
    """One envelope per item, in input order."""

    @pytest.mark.asyncio
    async def test_results_should_follow_input_order_not_completion_order(self) -> None:
        runner = BatchRunner()

        results = await runner.run(list(range(10)), echo_after_delay)

        assert [r.body for r in results] == [str(i) for i in range(10)]

    @pytest.mark.asyncio
    async def test_empty_batch_should_return_no_envelopes(self) -> None:
        results = await BatchRunner().run([], echo_after_delay)

        assert results == []

    @pytest.mark.asyncio
    async def test_generator_input_should_be_accepted(self) -> None:
        results = await BatchRunner().run((i for i in range(3)), echo_after_delay)

        assert [r.body for r in results] == ["0", "1", "2"]

    @pytest.mark.asyncio
    async def test_operations_should_run_concurrently(self) -> None:
        running = 0
        peak = 0

        async def track(value):
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1
            return ResultEnvelope.success(ResponseCode.SUCCESS_DELETE)

        await BatchRunner().run(range(5), track)

        assert peak == 5


class TestBatchRunnerFailures:
    """Per-item failures and batch construction failures."""

    @pytest.mark.asyncio
    async def test_raising_item_should_not_affect_siblings(self) -> None:
        results = await BatchRunner().run([0, 1, 2, 3], fail_on_odd)

        assert [r.status for r in results] == [
            ResponseCode.SUCCESS_CREATE,
            ResponseCode.BAD_REQUEST,
            ResponseCode.SUCCESS_CREATE,
            ResponseCode.BAD_REQUEST,
        ]
        assert results[1].error_kind == ErrorKind.TRANSPORT_FAILURE
        assert isinstance(results[1].cause, RuntimeError)
        assert results[1].error_message == "odd value 1"

    @pytest.mark.parametrize("items", [None, "abc", b"abc", {"a": 1}, 42])
    @pytest.mark.asyncio
    async def test_non_collection_should_yield_single_bad_request(self, items) -> None:
        results = await BatchRunner().run(items, echo_after_delay)

        assert len(results) == 1
        assert results[0].status == ResponseCode.BAD_REQUEST
        assert results[0].error_kind == ErrorKind.BATCH_CONSTRUCTION

    @pytest.mark.asyncio
    async def test_wrong_item_type_should_yield_single_bad_request(self) -> None:
        called = []

        async def record(value):
            called.append(value)
            return ResultEnvelope.success(ResponseCode.SUCCESS_DELETE)

        results = await BatchRunner().run(["a", 7, "b"], record, item_type=str)

        assert len(results) == 1
        assert results[0].error_kind == ErrorKind.BATCH_CONSTRUCTION
        assert "Item 1" in results[0].error_message
        assert called == []

    @pytest.mark.asyncio
    async def test_timer_should_record_batch(self) -> None:
        timer = OperationTimer(enable_logging=False)

        await BatchRunner(timer).run([0, 1], fail_on_odd, operation_name="create_batch")

        stats = timer.get_operation_stats("create_batch")
        assert stats.total_operations == 1
        assert stats.failed_operations == 1
