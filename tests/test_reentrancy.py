# tests/test_reentrancy.py
import pytest

from multitoken.errors import ReentrancyError
from multitoken.reentrancy import ReentrancyGuard


class TestGuard:
    def test_enter_then_exit(self):
        guard = ReentrancyGuard()
        guard.enter()
        assert guard.locked
        guard.exit()
        assert not guard.locked

    def test_second_enter_is_rejected(self):
        guard = ReentrancyGuard()
        guard.enter()
        with pytest.raises(ReentrancyError):
            guard.enter()
        assert guard.locked

    def test_exit_when_unlocked_is_not_an_error(self):
        guard = ReentrancyGuard()
        guard.exit()
        assert not guard.locked


class TestHeld:
    def test_released_after_block(self):
        guard = ReentrancyGuard()
        with guard.held():
            assert guard.locked
        assert not guard.locked

    def test_released_when_block_raises(self):
        guard = ReentrancyGuard()
        with pytest.raises(RuntimeError):
            with guard.held():
                raise RuntimeError("boom")
        assert not guard.locked

    def test_nested_hold_is_rejected_and_outer_keeps_lock(self):
        guard = ReentrancyGuard()
        with guard.held():
            with pytest.raises(ReentrancyError):
                with guard.held():
                    pass
            assert guard.locked
        assert not guard.locked
