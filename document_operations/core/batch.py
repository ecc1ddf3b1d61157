"""
Batch Runner

Fans a single-document operation out over a collection of inputs and
collects one envelope per input, in input order.
"""

import asyncio
import logging
from collections.abc import Iterable, Mapping
from typing import Any, Awaitable, Callable, List, Optional, Tuple, Type, Union

from document_operations.doc_ops_exceptions import BatchConstructionError
from document_operations.models.entities import (
    BatchItem,
    ErrorKind,
    ResponseCode,
    ResultEnvelope
)
from document_operations.utils.timing import OperationTimer

logger = logging.getLogger(__name__)

SingleOperation = Callable[[Any], Awaitable[ResultEnvelope]]

BATCH_ERR_MSG = "The batch could not be processed."


class BatchRunner:
    """
    Concurrent fan-out/fan-in executor for single-document operations.

    All per-item operations are started before any is awaited, and the
    runner then waits for all of them. A failing item never cancels or
    affects its siblings: a batch of N inputs yields exactly N envelopes and
    result[i] belongs to items[i], whatever the completion order.

    The one exception is a failure to build the per-item operations at all
    (the batch is not a collection, or an item has the wrong type); the
    whole call then yields a single BAD_REQUEST envelope.
    """

    def __init__(self, timer: Optional[OperationTimer] = None):
        self._timer = timer

    async def run(
        self,
        items: Iterable[Any],
        operation: SingleOperation,
        item_type: Optional[Union[Type, Tuple[Type, ...]]] = None,
        operation_name: str = "batch"
    ) -> List[ResultEnvelope]:
        """
        Apply operation to every item concurrently.

        Args:
            items: Ordered collection of inputs
            operation: Async single-document operation returning an envelope
            item_type: If given, every item must be an instance of it
            operation_name: Name used in logs and timings

        Returns:
            One envelope per item in input order, or a single BAD_REQUEST
            envelope if the batch could not be built
        """
        try:
            batch_items, pending = self._build(items, operation, item_type)
        except BatchConstructionError as e:
            logger.warning(f"{operation_name}: {e}")
            return [ResultEnvelope.failure(
                ResponseCode.BAD_REQUEST,
                f"{BATCH_ERR_MSG} {e}",
                ErrorKind.BATCH_CONSTRUCTION,
                e.__cause__ or e
            )]

        if self._timer is None:
            return await self._gather(batch_items, pending, operation_name)

        async with self._timer.time_operation(operation_name, {"item_count": len(batch_items)}) as timing:
            envelopes = await self._gather(batch_items, pending, operation_name)
            timing.success = not any(envelope.has_error for envelope in envelopes)
        return envelopes

    def _build(
        self,
        items: Any,
        operation: SingleOperation,
        item_type: Optional[Union[Type, Tuple[Type, ...]]]
    ) -> Tuple[List[BatchItem], List[Awaitable[ResultEnvelope]]]:
        if items is None or isinstance(items, (str, bytes, Mapping)) or not isinstance(items, Iterable):
            raise BatchConstructionError(f"Expected a collection of items, got {type(items).__name__}")

        pending = []
        try:
            batch_items = [BatchItem(index, value) for index, value in enumerate(items)]
            for item in batch_items:
                if item_type is not None and not isinstance(item.value, item_type):
                    raise BatchConstructionError(
                        f"Item {item.index} has type {type(item.value).__name__}"
                    )
                pending.append(operation(item.value))
        except Exception as e:
            for awaitable in pending:
                # never awaited; close to avoid "coroutine was never awaited"
                close = getattr(awaitable, "close", None)
                if close is not None:
                    close()
            if isinstance(e, BatchConstructionError):
                raise
            raise BatchConstructionError(str(e)) from e
        return batch_items, pending

    async def _gather(
        self,
        batch_items: List[BatchItem],
        pending: List[Awaitable[ResultEnvelope]],
        operation_name: str
    ) -> List[ResultEnvelope]:
        results = await asyncio.gather(*pending, return_exceptions=True)

        envelopes = []
        for item, result in zip(batch_items, results):
            if isinstance(result, ResultEnvelope):
                envelopes.append(result)
            elif isinstance(result, Exception):
                logger.warning(f"{operation_name}: item {item.index} raised {type(result).__name__}: {result}")
                envelopes.append(ResultEnvelope.failure(
                    ResponseCode.BAD_REQUEST, str(result) or type(result).__name__,
                    ErrorKind.TRANSPORT_FAILURE, result
                ))
            elif isinstance(result, BaseException):
                raise result
            else:
                raise TypeError(f"{operation_name} returned {type(result).__name__}, expected ResultEnvelope")

        failed = sum(1 for envelope in envelopes if envelope.has_error)
        logger.info(f"{operation_name}: {len(envelopes) - failed} of {len(envelopes)} items succeeded")
        return envelopes
