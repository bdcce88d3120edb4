"""Decorator for function retry call."""
# Copyright 2021 Fabian Bosler https://gist.github.com/FBosler/be10229aba491a8c912e3a1543bbc74e

# Permission is hereby granted, free of charge, to any person obtaining a copy of this software and associated
# documentation files (the "Software"), to deal in the Software without restriction, including without limitation the
# rights to use, copy, modify, merge, publish, distribute, sublicense, and/or sell copies of the Software, and to
# permit persons to whom the Software is furnished to do so, subject to the following conditions:

# The above copyright notice and this permission notice shall be included in all copies or substantial portions of the
# Software.

# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO
# THE WARRANTIES OF MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS
# OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR
# OTHERWISE, ARISING FROM, OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE SOFTWARE.

import asyncio
from functools import wraps
from typing import Any, Callable

from aiohttp import ClientConnectionError

from .logger import LOG


def retry(
    exceptions: tuple[type[BaseException], ...] = (ClientConnectionError,),
    total_tries: int = 4,
    initial_wait: float = 0.5,
    backoff_factor: int = 2,
) -> Any:
    """Call the decorated coroutine and apply an exponential backoff.

    Only the listed exceptions trigger a retry, anything else propagates on the first failure.

    :param exceptions: Exception(s) that trigger a retry, can be a tuple
    :param total_tries: Total tries
    :param initial_wait: Time to first retry
    :param backoff_factor: Backoff multiplier (e.g. value of 2 will double the delay each retry).
    """

    def retry_decorator(f: Callable) -> Callable:
        @wraps(f)
        async def func_with_retries(*args: Any, **kwargs: Any) -> Any:
            _tries, _delay = total_tries, initial_wait
            while True:
                try:
                    LOG.debug("Function: %s %d. try", f.__name__, total_tries + 1 - _tries)
                    return await f(*args, **kwargs)
                except exceptions as e:
                    _tries -= 1
                    if _tries < 1:
                        LOG.error("Function: %s failed after %d tries.", f.__name__, total_tries)
                        raise
                    LOG.info("Function: %s, Exception: %s. Retrying in %s seconds.", f.__name__, e, _delay)
                    await asyncio.sleep(_delay)
                    _delay *= backoff_factor

        return func_with_retries

    return retry_decorator
