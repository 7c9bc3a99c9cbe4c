import dataclasses
import math
import time

from typing import Dict, List


class RateLimiter:
    # Interface

    def delay(self, item):
        raise NotImplementedError()

    def forget(self, item):
        raise NotImplementedError()

    def count(self, item):
        raise NotImplementedError()


@dataclasses.dataclass(init=False)
class MaxOfRateLimiter(RateLimiter):
    """Asks all its limiters and returns the worst answer."""

    limiters: List[RateLimiter]

    def __init__(self, *limiters):
        self.limiters = limiters

    def delay(self, item):
        return max(limiter.delay(item) for limiter in self.limiters)

    def forget(self, item):
        for limiter in self.limiters:
            limiter.forget(item)

    def count(self, item):
        return max(limiter.count(item) for limiter in self.limiters)


@dataclasses.dataclass
class BucketRateLimiter(RateLimiter):
    """Overall rate limit, independent of the item."""

    # Maximum number of tokens in the bucket.
    capacity: int = 100
    # Tokens added per second.
    rate: int = 10
    clock: callable = time.monotonic

    def __post_init__(self):
        self._tokens = self.capacity
        self._last_added = self.clock()
        self._missing_tokens = 0

    def _add_tokens(self):
        now = self.clock()
        tokens_to_add = int((now - self._last_added) * self.rate)
        if tokens_to_add > 0:
            self._tokens = min(self.capacity, self._tokens + tokens_to_add)
            self._last_added = now

    def delay(self, item):
        self._add_tokens()
        if self._tokens > 0:
            self._missing_tokens = 0
            self._tokens -= 1
            return 0
        # 0.1 seconds per missing token.
        # See https://danielmangum.com/posts/controller-runtime-client-go-rate-limiting/
        self._missing_tokens += 1
        return self._missing_tokens * 0.1

    def forget(self, item):
        pass

    def count(self, item):
        return 0


@dataclasses.dataclass
class ItemExponentialFailureRateLimiter(RateLimiter):
    """Per item exponential backoff: base_delay * 2^failures, capped at max_delay."""

    base_delay: float = 0.005
    max_delay: float = 1000
    items: Dict[object, int] = dataclasses.field(default_factory=dict, init=False)

    def delay(self, item):
        failures = self.items.get(item, 0)
        self.items[item] = failures + 1
        # math.pow overflows for large exponents.
        backoff = self.base_delay * math.pow(2, min(failures, 64))
        return min(backoff, self.max_delay)

    def forget(self, item):
        self.items.pop(item, None)

    def count(self, item):
        return self.items.get(item, 0)


def default_rate_limiter():
    return MaxOfRateLimiter(
        ItemExponentialFailureRateLimiter(),
        BucketRateLimiter(),
    )
