"""Tests for ProvisioningSignal (flags + awaitable provisioning outcome)."""

import asyncio

from app.application.dtos.identity import ProvisioningResult
from app.application.services.provisioning_signal import (
    SIGNUP_COMPLETED_KEY,
    SIGNUP_IN_PROGRESS_KEY,
    ProvisioningSignal,
)

RESULT = ProvisioningResult(uid="u1", email="a@b.gov", organization_id="acme", arcgis_org_id="org_1")


async def test_begin_sets_in_flight_flag() -> None:
    store: dict[str, str] = {}
    signal = ProvisioningSignal(store)
    assert not signal.in_flight
    signal.begin()
    assert signal.in_flight
    assert store[SIGNUP_IN_PROGRESS_KEY] == "true"


async def test_complete_clears_in_flight_and_sets_just_completed_once() -> None:
    store: dict[str, str] = {}
    signal = ProvisioningSignal(store)
    signal.begin()
    signal.complete(RESULT)
    assert not signal.in_flight
    assert store[SIGNUP_COMPLETED_KEY] == "true"
    assert signal.consume_just_completed() is True
    assert signal.consume_just_completed() is False


async def test_fail_clears_in_flight_without_completion() -> None:
    store: dict[str, str] = {}
    signal = ProvisioningSignal(store)
    signal.begin()
    signal.fail()
    assert not signal.in_flight
    assert signal.consume_just_completed() is False


async def test_wait_returns_result_as_soon_as_provisioning_completes() -> None:
    signal = ProvisioningSignal({})
    signal.begin()
    waiter = asyncio.create_task(signal.wait(timeout=5.0))
    await asyncio.sleep(0)
    signal.complete(RESULT)
    assert await asyncio.wait_for(waiter, 1.0) == RESULT


async def test_wait_returns_none_on_failure() -> None:
    signal = ProvisioningSignal({})
    signal.begin()
    waiter = asyncio.create_task(signal.wait(timeout=5.0))
    await asyncio.sleep(0)
    signal.fail()
    assert await asyncio.wait_for(waiter, 1.0) is None


async def test_wait_times_out_while_still_in_flight() -> None:
    signal = ProvisioningSignal({})
    signal.begin()
    assert await signal.wait(timeout=0.01) is None
    assert signal.in_flight


async def test_abandoned_flag_degrades_to_fixed_wait() -> None:
    """A flag left by another process (no in-process future) waits the full delay."""
    store = {SIGNUP_IN_PROGRESS_KEY: "true"}
    signal = ProvisioningSignal(store)
    assert signal.in_flight
    loop = asyncio.get_running_loop()
    started = loop.time()
    assert await signal.wait(timeout=0.05) is None
    assert loop.time() - started >= 0.04
