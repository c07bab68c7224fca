"""Shared test fixtures."""

import json
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from src.main import app


@pytest.fixture
def write_config(tmp_path: Path):
    """Write a config.json into tmp_path and return its path."""

    def _write(solana: dict, name: str = "config.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps({"solana": solana}), encoding="utf-8")
        return path

    return _write


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
