"""Per-cart locks, in-process and Redis backed."""

import threading
import time

import pytest
import redis

from marketplace.domain.errors import CartBusy
from marketplace.services.lock_service import (
    LocalCartLock,
    RedisCartLock,
    build_lock_service,
)


class FakeRedis:
    """Just enough of SET NX EX and the compare-and-delete script."""

    def __init__(self):
        self.data = {}

    def set(self, name, value, nx=False, ex=None):
        if nx and name in self.data:
            return None
        self.data[name] = value
        return True

    def eval(self, script, numkeys, key, token):
        if self.data.get(key) == token:
            del self.data[key]
            return 1
        return 0


class TestLocalCartLock:
    def test_busy_cart_times_out(self):
        locks = LocalCartLock(wait_seconds=0.05)
        entered = threading.Event()
        leave = threading.Event()

        def holder():
            with locks.hold(1):
                entered.set()
                leave.wait(2)

        t = threading.Thread(target=holder)
        t.start()
        entered.wait(2)
        try:
            with pytest.raises(CartBusy):
                with locks.hold(1):
                    pass
        finally:
            leave.set()
            t.join()

    def test_other_carts_are_independent(self):
        locks = LocalCartLock(wait_seconds=0.05)
        with locks.hold(1):
            with locks.hold(2):
                pass

    def test_released_after_error(self):
        locks = LocalCartLock(wait_seconds=0.05)
        with pytest.raises(RuntimeError):
            with locks.hold(1):
                raise RuntimeError("boom")

        with locks.hold(1):
            pass

    def test_serializes_read_modify_write(self):
        locks = LocalCartLock(wait_seconds=5)
        counter = {"n": 0}

        def bump():
            for _ in range(200):
                with locks.hold(7):
                    value = counter["n"]
                    counter["n"] = value + 1

        threads = [threading.Thread(target=bump) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert counter["n"] == 800

    def test_forgets_carts_nobody_holds(self):
        locks = LocalCartLock(wait_seconds=0.05)

        for cart_id in range(50):
            with locks.hold(cart_id):
                assert cart_id in locks._locks

        assert locks._locks == {}
        assert locks._users == {}

    def test_keeps_lock_while_someone_waits(self):
        locks = LocalCartLock(wait_seconds=2)
        entered = threading.Event()
        release = threading.Event()
        got_it = []

        def holder():
            with locks.hold(3):
                entered.set()
                release.wait(2)

        def waiter():
            with locks.hold(3):
                got_it.append(True)

        first = threading.Thread(target=holder)
        first.start()
        entered.wait(2)
        second = threading.Thread(target=waiter)
        second.start()

        deadline = time.monotonic() + 2
        while locks._users.get(3) != 2 and time.monotonic() < deadline:
            time.sleep(0.01)
        assert locks._users[3] == 2

        release.set()
        first.join()
        second.join()

        assert got_it == [True]
        assert locks._locks == {}


class TestRedisCartLock:
    def test_lock_key_is_set_and_released(self):
        fake = FakeRedis()
        locks = RedisCartLock(client=fake, wait_seconds=0.1)

        with locks.hold(5):
            assert "cart:5:lock" in fake.data

        assert fake.data == {}

    def test_held_cart_is_busy(self):
        fake = FakeRedis()
        fake.data["cart:5:lock"] = "someone-else"
        locks = RedisCartLock(client=fake, wait_seconds=0.1)

        with pytest.raises(CartBusy):
            with locks.hold(5):
                pass

        assert fake.data["cart:5:lock"] == "someone-else"

    def test_does_not_release_foreign_lock(self):
        fake = FakeRedis()
        locks = RedisCartLock(client=fake, wait_seconds=0.1)

        with locks.hold(5):
            # lock wygasl i przejal go ktos inny
            fake.data["cart:5:lock"] = "someone-else"

        assert fake.data["cart:5:lock"] == "someone-else"

    def test_failed_release_does_not_escape(self):
        fake = FakeRedis()

        def broken_eval(script, numkeys, key, token):
            raise redis.ConnectionError("connection reset")

        fake.eval = broken_eval
        locks = RedisCartLock(client=fake, wait_seconds=0.1)

        with locks.hold(5):
            pass

        # zostaje do wygasniecia TTL
        assert "cart:5:lock" in fake.data


def test_build_without_redis_url_is_local():
    assert isinstance(build_lock_service(""), LocalCartLock)
