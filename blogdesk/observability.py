# blogdesk/observability.py
import functools
import logging
import time

from prometheus_client import Counter, Histogram

from blogdesk.config import REQUEST_LATENCY_BUCKETS

logger = logging.getLogger(__name__)

# 커스텀 메트릭: RPC procedure 단위 요청 수 / 지연 시간
rpc_requests_total = Counter(
    "rpc_requests_total",
    "Total number of RPC procedure calls",
    ("type", "path", "outcome"),
)

rpc_request_duration_seconds = Histogram(
    "rpc_request_duration_seconds",
    "RPC procedure latency in seconds",
    ("type", "path"),
    buckets=REQUEST_LATENCY_BUCKETS,
)


def observe_procedure(kind: str, path: str):
    """Wrap an async procedure handler with logging and metrics.

    Records the procedure kind, its path, whether it succeeded and how long
    it took. The wrapped call's result or exception passes through unchanged.
    """
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as exc:
                elapsed = time.perf_counter() - start
                rpc_requests_total.labels(kind, path, "error").inc()
                rpc_request_duration_seconds.labels(kind, path).observe(elapsed)
                message = getattr(exc, "message", None) or str(exc)
                logger.error(f'[rpc] Error request: {kind} "{path}" - {elapsed * 1000:.2f}ms - {message}')
                raise

            elapsed = time.perf_counter() - start
            rpc_requests_total.labels(kind, path, "ok").inc()
            rpc_request_duration_seconds.labels(kind, path).observe(elapsed)
            logger.info(f'[rpc] OK request: {kind} "{path}" - {elapsed * 1000:.2f}ms')
            return result

        wrapper.rpc_kind = kind
        wrapper.rpc_path = path
        return wrapper

    return decorator
