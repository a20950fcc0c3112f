"""Tests for ReadinessGate and ErrorChannel."""

import asyncio

import pytest

from redis_lua_loader.execution.signals import ErrorChannel, ReadinessGate, ReadinessState


class TestReadinessGate:
    """Test ReadinessGate."""
    
    def test_initial_state(self):
        gate = ReadinessGate()
        assert gate.state is ReadinessState.IDLE
        gate.begin()
        assert gate.state is ReadinessState.WAITING
        assert not gate.is_ready
    
    @pytest.mark.parametrize("order", [
        ("mark_store_connected", "mark_scripts_loaded"),
        ("mark_scripts_loaded", "mark_store_connected"),
    ])
    def test_fires_once_in_either_order(self, order):
        gate = ReadinessGate()
        fired = []
        gate.on_ready(lambda: fired.append(True))
        gate.begin()
        
        getattr(gate, order[0])()
        assert fired == []
        getattr(gate, order[1])()
        assert fired == [True]
        
        # repeated marks after ready are no-ops
        gate.mark_store_connected()
        gate.mark_scripts_loaded()
        assert fired == [True]
        assert gate.state is ReadinessState.READY
    
    def test_one_precondition_is_not_enough(self):
        gate = ReadinessGate()
        gate.mark_scripts_loaded()
        gate.mark_scripts_loaded()
        assert not gate.is_ready
    
    def test_late_listener_called_immediately(self):
        gate = ReadinessGate()
        gate.mark_store_connected()
        gate.mark_scripts_loaded()
        
        fired = []
        gate.on_ready(lambda: fired.append(True))
        assert fired == [True]
    
    @pytest.mark.asyncio
    async def test_wait(self):
        gate = ReadinessGate()
        
        async def open_gate():
            await asyncio.sleep(0)
            gate.mark_store_connected()
            gate.mark_scripts_loaded()
        
        await asyncio.gather(gate.wait(), open_gate())
        assert gate.is_ready


class TestErrorChannel:
    """Test ErrorChannel."""
    
    def test_fans_out(self, logger):
        channel = ErrorChannel(logger)
        a, b = [], []
        channel.subscribe(a.append)
        channel.subscribe(b.append)
        
        error = RuntimeError("boom")
        channel.emit(error)
        channel.emit(error)
        
        assert a == [error, error]
        assert b == [error, error]
        logger.error.assert_not_called()
    
    def test_unsubscribe(self, logger):
        channel = ErrorChannel(logger)
        seen = []
        unsubscribe = channel.subscribe(seen.append)
        unsubscribe()
        unsubscribe()
        
        channel.emit(RuntimeError("boom"))
        
        assert seen == []
        assert len(channel) == 0
    
    def test_unhandled_errors_are_logged(self, logger):
        channel = ErrorChannel(logger)
        channel.emit(RuntimeError("nobody listening"))
        
        logger.error.assert_called_once()
        assert "nobody listening" in logger.error.call_args[0][0]
    
    def test_raising_listener_is_isolated(self, logger):
        channel = ErrorChannel(logger)
        seen = []
        
        def rethrow(err):
            seen.append(err)
            raise err
        
        channel.subscribe(rethrow)
        channel.subscribe(seen.append)
        
        error = RuntimeError("boom")
        channel.emit(error)
        
        assert seen == [error, error]
        logger.error.assert_called_once()
        assert "boom" in logger.error.call_args[0][0]
