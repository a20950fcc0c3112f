"""Tests for ScriptFinder."""

import os
from pathlib import Path

import pytest

from redis_lua_loader.errors import DiscoveryError
from redis_lua_loader.scripts.barrier import LoadBarrier
from redis_lua_loader.scripts.finder import ScriptFile, ScriptFinder


async def collect(roots, extension=".lua"):
    found = []
    errors = []
    
    async def on_script(script):
        found.append(script)
    
    barrier = await ScriptFinder(extension).scan(roots, on_script, errors.append, LoadBarrier())
    return found, errors, barrier


class TestScriptFile:
    """Test ScriptFile names."""
    
    def test_names(self, tmp_path):
        script = ScriptFile(path=tmp_path / "auth" / "check_token.lua", root=tmp_path, source="")
        assert script.base_name == "check_token"
        assert script.relative_name == "auth/check_token"
    
    def test_relative_name_outside_root(self, tmp_path):
        script = ScriptFile(path=Path("/elsewhere/x.lua"), root=tmp_path, source="")
        assert script.relative_name == "x"


@pytest.mark.asyncio
class TestScriptFinder:
    """Test recursive concurrent discovery."""
    
    async def test_finds_scripts_recursively(self, lua_dir, lua2_dir):
        found, errors, _ = await collect([lua_dir, lua2_dir])
        
        assert errors == []
        assert sorted(s.base_name for s in found) == [
            "bad-json", "get_key", "incr_by", "return_one", "test"
        ]
        nested = next(s for s in found if s.base_name == "get_key")
        assert nested.root == lua2_dir
        assert nested.relative_name == "nested/get_key"
        assert nested.source == "return redis.call('GET', KEYS[1])"
    
    async def test_ignores_other_extensions(self, tmp_path, write_scripts):
        root = write_scripts(tmp_path / "mixed", {
            "a.lua": "return 1",
            "b.txt": "text",
            "c.LUA": "return 3",
            "lua": "no extension",
        })
        found, _, _ = await collect([root])
        assert [s.base_name for s in found] == ["a"]
    
    async def test_custom_extension(self, tmp_path, write_scripts):
        root = write_scripts(tmp_path / "custom", {"a.lua": "return 1", "b.redis": "return 2"})
        found, _, _ = await collect([root], extension="redis")
        assert [s.base_name for s in found] == ["b"]
    
    async def test_barrier_counts_directories_and_files(self, lua2_dir):
        """One unit per directory listing plus one per script file."""
        _, _, barrier = await collect([lua2_dir])
        # lua2/, lua2/nested/, incr_by.lua, nested/get_key.lua
        assert barrier.completed == 4
        assert barrier.released
    
    async def test_empty_directory(self, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()
        found, errors, barrier = await collect([empty])
        
        assert found == []
        assert errors == []
        assert barrier.completed == 1
        assert barrier.released
    
    async def test_no_roots(self):
        found, errors, barrier = await collect([])
        assert found == []
        assert barrier.released
    
    async def test_missing_directory_reported(self, tmp_path, lua_dir):
        """A missing root is reported; the other roots still load."""
        found, errors, barrier = await collect([tmp_path / "missing", lua_dir])
        
        assert len(found) == 3
        assert len(errors) == 1
        assert isinstance(errors[0], DiscoveryError)
        assert errors[0].path == tmp_path / "missing"
        assert barrier.released
    
    async def test_unreadable_file_reported(self, tmp_path, write_scripts):
        root = write_scripts(tmp_path / "bad", {"good.lua": "return 1"})
        (root / "binary.lua").write_bytes(b"\xff\xfe\xfa")
        
        found, errors, _ = await collect([root])
        
        assert [s.base_name for s in found] == ["good"]
        assert len(errors) == 1
        assert isinstance(errors[0], DiscoveryError)
        assert errors[0].path == root / "binary.lua"
    
    async def test_handler_errors_are_reported(self, lua_dir):
        """An exception escaping the handler is reported and the scan still completes."""
        errors = []
        
        async def on_script(script):
            raise ValueError(f"boom {script.base_name}")
        
        barrier = await ScriptFinder().scan([lua_dir], on_script, errors.append)
        
        assert len(errors) == 3
        assert all(isinstance(e, ValueError) for e in errors)
        assert barrier.released
    
    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
    async def test_symlink_cycle(self, tmp_path, write_scripts):
        root = write_scripts(tmp_path / "loop", {"a.lua": "return 1"})
        try:
            (root / "again").symlink_to(root, target_is_directory=True)
        except OSError:
            pytest.skip("symlinks not permitted")
        
        found, errors, barrier = await collect([root])
        
        assert [s.base_name for s in found] == ["a"]
        assert barrier.released
