"""Bounded retries for calls that fail while the scheduler is unavailable."""

import logging
import time

LOG = logging.getLogger(__name__)


def attempt(func, attempts, delay, sleep=time.sleep, retryOn=(Exception,), log=LOG):
    """
    Call func until it returns, at most `attempts` times, sleeping `delay`
    seconds between calls. The last failure is re-raised.
    """
    if attempts < 1:
        raise ValueError("attempts must be >= 1, got {!r}".format(attempts))
    for attemptNum in range(1, attempts + 1):
        try:
            return func()
        except retryOn as err:
            if attemptNum >= attempts:
                log.debug("attempt %d/%d failed, giving up", attemptNum, attempts)
                raise
            log.warning("Attempt %d/%d failed: %s. Retrying in %g seconds.",
                        attemptNum, attempts, err, delay)
            sleep(delay)
