import asyncio
import time
import unittest

from addrgraph.adapters.ledger.rate_limiter import RateLimiter


class _FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class RateLimiterTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.clock = _FakeClock()
        self.rl = RateLimiter(12, clock=self.clock, sleep=self.clock.sleep)

    async def test_first_call_is_immediate(self) -> None:
        await self.rl.acquire()

        self.assertEqual(self.clock.sleeps, [])

    async def test_back_to_back_calls_wait_full_interval(self) -> None:
        await self.rl.acquire()
        await self.rl.acquire()

        self.assertEqual(self.clock.sleeps, [12])

    async def test_waits_only_the_remainder(self) -> None:
        await self.rl.acquire()
        self.clock.now += 5
        await self.rl.acquire()

        self.assertEqual(self.clock.sleeps, [7])

    async def test_no_wait_after_interval_elapsed(self) -> None:
        await self.rl.acquire()
        self.clock.now += 20
        await self.rl.acquire()

        self.assertEqual(self.clock.sleeps, [])

    async def test_concurrent_acquires_are_spaced(self) -> None:
        stamps = []

        async def worker():
            await self.rl.acquire()
            stamps.append(self.clock.now)

        await asyncio.gather(*(worker() for _ in range(4)))

        stamps.sort()
        gaps = [b - a for a, b in zip(stamps, stamps[1:])]
        self.assertEqual(len(gaps), 3)
        self.assertTrue(all(g >= 12 for g in gaps))

    async def test_wait_does_not_block_event_loop(self) -> None:
        rl = RateLimiter(0.2)
        await rl.acquire()
        ticks = []

        async def ticker():
            for _ in range(3):
                ticks.append(time.monotonic())
                await asyncio.sleep(0.01)

        start = time.monotonic()
        await asyncio.gather(rl.acquire(), ticker())

        self.assertGreaterEqual(time.monotonic() - start, 0.15)
        self.assertEqual(len(ticks), 3)
        self.assertLess(ticks[-1] - start, 0.15)

    def test_negative_interval_rejected(self) -> None:
        with self.assertRaises(ValueError):
            RateLimiter(-1)


if __name__ == "__main__":
    unittest.main()
