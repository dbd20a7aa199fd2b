"""Shared fixtures for the jq MCP Server tests."""
import asyncio
import json
import os
import shutil
from typing import List

import pytest

from jq_mcp_server import config as config_module
from jq_mcp_server.core import executor

JQ_AVAILABLE = shutil.which("jq") is not None


def pytest_collection_modifyitems(config, items):
    if JQ_AVAILABLE:
        return
    skip_jq = pytest.mark.skip(reason="jq binary not found on PATH")
    for item in items:
        if "requires_jq" in item.keywords:
            item.add_marker(skip_jq)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Load default configuration, ignoring config files and JQ_MCP_* variables on this machine."""
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith(config_module.ENV_PREFIX):
            monkeypatch.delenv(key)
    config_module.reset_config()
    cfg = config_module.load_config(load_default_files=False)
    yield cfg
    config_module.reset_config()


@pytest.fixture
def spawn_counter(monkeypatch) -> List[tuple]:
    """Record every subprocess the executor spawns, still running the real process."""
    calls: List[tuple] = []
    real_exec = asyncio.create_subprocess_exec

    async def counting_exec(*args, **kwargs):
        calls.append(args)
        return await real_exec(*args, **kwargs)

    monkeypatch.setattr(executor.asyncio, "create_subprocess_exec", counting_exec)
    return calls


@pytest.fixture
def sample_object() -> str:
    return json.dumps({
        "name": "John Doe",
        "age": 30,
        "email": "john@example.com",
        "address": {"city": "New York", "zip": "10001"},
    })


@pytest.fixture
def sample_users() -> str:
    return json.dumps([
        {"name": "Alice", "age": 30, "active": True, "department": "engineering"},
        {"name": "Bob", "age": 25, "active": False, "department": "sales"},
        {"name": "Carol", "age": 35, "active": True, "department": "engineering"},
    ])


@pytest.fixture
def sample_numbers() -> str:
    return "[1, 2, 3, 4, 5]"
