import logging
import time
from typing import Callable, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def with_retry(
    fn: Callable[[], T],
    retries: int = 2,
    delay: float = 0.6,
    factor: float = 1.5,
    exceptions: Tuple[Type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``fn`` with bounded exponential backoff.

    At most ``retries + 1`` attempts are made. The delay before each retry
    grows by ``factor``. The last exception is re-raised unchanged.
    """
    attempt = 0
    while True:
        try:
            return fn()
        except exceptions as e:
            if attempt >= retries:
                raise
            logger.warning("Attempt %d failed (%s), retrying in %.2fs", attempt + 1, e, delay)
            sleep(delay)
            attempt += 1
            delay *= factor
