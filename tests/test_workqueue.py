import anyio
import pytest

from podprinter.workqueue import (
    BucketRateLimiter,
    ItemExponentialFailureRateLimiter,
    MaxOfRateLimiter,
    Workqueue,
)


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
async def queue():
    queue = Workqueue()
    async with anyio.create_task_group() as tg:
        await tg.start(queue)
        yield queue
        tg.cancel_scope.cancel()


@pytest.mark.anyio
async def test_items_are_deduplicated(queue):
    await queue.add('a')
    await queue.add('a')
    await queue.add('b')

    assert len(queue) == 2
    assert await queue.get() == 'a'
    assert await queue.get() == 'b'


@pytest.mark.anyio
async def test_item_in_processing_is_not_handed_out_twice(queue):
    await queue.add('a')
    item = await queue.get()

    await queue.add('a')
    assert len(queue) == 0

    await queue.done(item)
    assert len(queue) == 1
    assert await queue.get() == 'a'


@pytest.mark.anyio
async def test_done_without_re_add_empties_the_queue(queue):
    await queue.add('a')
    await queue.done(await queue.get())

    assert len(queue) == 0


@pytest.mark.anyio
async def test_get_waits_for_an_item(queue):
    received = []

    async def consumer():
        received.append(await queue.get())

    async with anyio.create_task_group() as tg:
        tg.start_soon(consumer)
        await anyio.sleep(0.01)
        assert received == []
        await queue.add('a')

    assert received == ['a']


@pytest.mark.anyio
async def test_add_after(queue):
    await queue.add_after('a', 0.05)
    assert len(queue) == 0
    assert 'a' in queue._delayed

    with anyio.fail_after(1):
        assert await queue.get() == 'a'


@pytest.mark.anyio
async def test_add_after_without_delay_adds_right_away(queue):
    await queue.add_after('a', 0)

    assert len(queue) == 1


@pytest.mark.anyio
async def test_add_rate_limited_backs_off(queue):
    await queue.add_rate_limited('a')
    await queue.add_rate_limited('a')

    assert await queue.num_requeues('a') == 2
    await queue.forget('a')
    assert await queue.num_requeues('a') == 0


@pytest.mark.anyio
async def test_items_added_before_start_are_buffered():
    queue = Workqueue()
    await queue.add('a')
    await queue.add('b')

    async with anyio.create_task_group() as tg:
        await tg.start(queue)
        assert len(queue) == 2
        assert await queue.get() == 'a'
        tg.cancel_scope.cancel()


def test_exponential_failure_rate_limiter():
    limiter = ItemExponentialFailureRateLimiter(base_delay=0.005, max_delay=0.02)

    assert [limiter.delay('a') for _ in range(4)] == [0.005, 0.01, 0.02, 0.02]
    assert limiter.delay('b') == 0.005
    assert limiter.count('a') == 4

    limiter.forget('a')
    assert limiter.count('a') == 0
    assert limiter.delay('a') == 0.005


def test_exponential_failure_rate_limiter_survives_many_failures():
    limiter = ItemExponentialFailureRateLimiter()
    limiter.items['a'] = 5000

    assert limiter.delay('a') == 1000


def test_bucket_rate_limiter():
    clock = FakeClock()
    limiter = BucketRateLimiter(capacity=2, rate=10, clock=clock)

    assert limiter.delay('a') == 0
    assert limiter.delay('b') == 0
    assert limiter.delay('c') == pytest.approx(0.1)
    assert limiter.delay('d') == pytest.approx(0.2)

    clock.now += 1
    assert limiter.delay('e') == 0


def test_max_of_rate_limiter():
    limiter = MaxOfRateLimiter(
        ItemExponentialFailureRateLimiter(base_delay=1),
        BucketRateLimiter(),
    )

    assert limiter.delay('a') == 1
    assert limiter.delay('a') == 2
    assert limiter.count('a') == 2
    limiter.forget('a')
    assert limiter.count('a') == 0
