"""
Utility functions for lazy sequences: logging setup and declarative pipelines.

A pipeline is a source value plus a list of OperationSpec steps; it is
wrapped with Lazy(), the steps are chained in order, and the result is
materialized once at the end.
"""

import logging
import sys
import time
from typing import Optional

from lazy import Lazy, Sequence
from models import LazySettings, OperationSpec, OperationType, PipelineRequest, PipelineResult

logger = logging.getLogger(__name__)


def setup_logging(settings: Optional[LazySettings] = None) -> logging.Logger:
    """Send library logs to stdout at the configured level"""
    settings = settings or LazySettings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s:%(lineno)d] - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    return logging.getLogger('lazy')


def apply_operation(seq: Sequence, op: OperationSpec) -> Sequence:
    """Chain one pipeline step onto ``seq``"""
    if op.type == OperationType.MAP:
        return seq.map(op.function)
    elif op.type == OperationType.FILTER:
        return seq.filter(op.function)
    elif op.type == OperationType.REJECT:
        return seq.reject(op.function)
    elif op.type == OperationType.TAKE:
        return seq.take(op.count)
    elif op.type == OperationType.SKIP:
        return seq.skip(op.count)
    elif op.type == OperationType.UNIQ:
        return seq.uniq(op.function)
    elif op.type == OperationType.FLATTEN:
        return seq.flatten()
    elif op.type == OperationType.SORT_BY:
        return seq.sort_by(op.function)
    elif op.type == OperationType.CHUNK:
        return seq.chunk(op.size)
    raise ValueError(f"Unknown op: {op.type}")


def run_pipeline(request: PipelineRequest) -> PipelineResult:
    """Run a declarative pipeline and materialize its output"""
    start_time = time.perf_counter()

    seq = Lazy(request.source)
    source_kind = type(seq).__name__
    operations_applied = []

    for op in request.operations:
        seq = apply_operation(seq, op)
        operations_applied.append(op.type.value)

    if request.limit is not None:
        seq = seq.take(request.limit)

    logger.info(f"Running pipeline over {source_kind}: {' -> '.join(operations_applied) or 'identity'}")

    try:
        result = seq.to_list()
    except Exception as e:
        logger.error(f"Pipeline failed after {(time.perf_counter() - start_time) * 1000:.3f}ms: {e}", exc_info=True)
        raise

    processing_time_ms = (time.perf_counter() - start_time) * 1000
    logger.info(f"Pipeline produced {len(result)} elements in {processing_time_ms:.3f}ms")

    return PipelineResult(
        result=result,
        operations_applied=operations_applied,
        source_kind=source_kind,
        output_size=len(result),
        processing_time_ms=processing_time_ms
    )
