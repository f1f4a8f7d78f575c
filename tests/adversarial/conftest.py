"""
Shared fixtures for adversarial tests.

Runs the real SignupService against the in-memory stores, whose
per-operation locking mirrors the single-statement atomicity of the
PostgreSQL adapters.
"""

import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import pytest

from src.domain.signup import SignupService


@pytest.fixture
def run_concurrently() -> Callable[[Callable[[], Any], int], list[Any]]:
    """
    Run fn from n threads released at the same moment.

    Returns each call's result, or the exception it raised.
    """

    def runner(fn: Callable[[], Any], n: int) -> list[Any]:
        barrier = threading.Barrier(n)

        def call() -> Any:
            barrier.wait()
            try:
                return fn()
            except Exception as e:
                return e

        with ThreadPoolExecutor(max_workers=n) as executor:
            futures = [executor.submit(call) for _ in range(n)]
            return [f.result() for f in futures]

    return runner


@pytest.fixture
def started_signup(service: SignupService) -> str:
    """Start a signup with a known code and return it."""
    service.code_generator = lambda: "123456"
    service.signup_init("victim@example.com", "secret1", "attacker")
    return "123456"
