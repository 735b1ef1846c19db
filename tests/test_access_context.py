"""
tests.test_access_context

Access Context lifecycle and ordering guarantees.
"""

from __future__ import annotations

import asyncio

import pytest
from conftest import FakeDirectory, FakeIdentityProvider

from mutamba_erp.auth.models import Identity, Role
from mutamba_erp.rbac.resolver import RoleResolver
from mutamba_erp.session.context import AccessContext, AccessState

SUPER = "boss@mutamba.test"
ANA = Identity(uid="ana", email="ana@mutamba.test", display_name="Ana")
BIA = Identity(uid="bia", email="bia@mutamba.test", display_name="Bia")
BOSS = Identity(uid="boss", email=SUPER, display_name="Boss")


def _context(provider: FakeIdentityProvider, directory: FakeDirectory) -> AccessContext:
    resolver = RoleResolver(directory=directory, super_admin_email=SUPER)
    return AccessContext(provider=provider, resolver=resolver)


def _gate(directory: FakeDirectory, uid: str) -> asyncio.Event:
    directory.gates[uid] = asyncio.Event()
    return directory.gates[uid]


@pytest.mark.asyncio
async def test_initial_state_is_loading(provider, directory) -> None:
    ctx = _context(provider, directory)
    seen: list[AccessState] = []
    ctx.subscribe(seen.append)

    assert ctx.state == AccessState(identity=None, role=None, loading=True)
    assert seen == [ctx.state]


@pytest.mark.asyncio
async def test_sign_in_publishes_resolved_role(provider, directory) -> None:
    directory.docs["ana"] = {"role": "admin"}
    ctx = _context(provider, directory)
    ctx.start()

    provider.emit(1, ANA)
    assert ctx.state.loading  # unchanged until resolution completes
    await ctx.settle()

    assert ctx.state == AccessState(identity=ANA, role=Role.admin, loading=False)
    assert ctx.state.is_admin


@pytest.mark.asyncio
async def test_sign_out_notification_clears_state(provider, directory) -> None:
    ctx = _context(provider, directory)
    ctx.start()
    provider.emit(1, ANA)
    await ctx.settle()

    provider.emit(2, None)

    assert ctx.state == AccessState(identity=None, role=None, loading=False)


@pytest.mark.asyncio
async def test_out_of_order_notification_is_dropped(provider, directory) -> None:
    ctx = _context(provider, directory)
    ctx.start()

    provider.emit(3, BIA)
    provider.emit(2, ANA)
    provider.emit(1, None)
    await ctx.settle()

    assert ctx.state.identity == BIA
    assert ctx.state.role is Role.user
    assert directory.reads == ["bia"]


@pytest.mark.asyncio
async def test_stale_resolution_never_overwrites_newer_state(provider, directory) -> None:
    directory.docs["ana"] = {"role": "admin"}
    gate = _gate(directory, "ana")
    ctx = _context(provider, directory)
    published: list[AccessState] = []
    ctx.subscribe(published.append)
    ctx.start()

    provider.emit(1, ANA)  # slow: blocked on the gate
    provider.emit(2, BIA)  # fast
    await asyncio.sleep(0)
    await asyncio.sleep(0)
    assert ctx.state.identity == BIA

    gate.set()
    await ctx.settle()

    assert ctx.state == AccessState(identity=BIA, role=Role.user, loading=False)
    assert all(s.identity != ANA for s in published)


@pytest.mark.asyncio
async def test_sign_out_while_resolution_pending(provider, directory) -> None:
    directory.docs["ana"] = {"role": "admin"}
    gate = _gate(directory, "ana")
    ctx = _context(provider, directory)
    ctx.start()

    provider.emit(1, ANA)
    provider.emit(2, None)
    gate.set()
    await ctx.settle()

    assert ctx.state == AccessState(identity=None, role=None, loading=False)


@pytest.mark.asyncio
async def test_super_admin_skips_directory(provider, directory) -> None:
    directory.fail_reads = True
    ctx = _context(provider, directory)
    ctx.start()

    provider.emit(1, BOSS)
    await ctx.settle()

    assert ctx.state.role is Role.admin
    assert directory.reads == []


@pytest.mark.asyncio
async def test_directory_failure_publishes_fail_closed_state(provider, directory) -> None:
    directory.docs["ana"] = {"role": "admin"}
    directory.fail_reads = True
    ctx = _context(provider, directory)
    ctx.start()

    provider.emit(1, ANA)
    await ctx.settle()

    assert ctx.state.identity is None
    assert ctx.state.role is None
    assert ctx.state.loading is False
    assert ctx.state.error

    directory.fail_reads = False
    await ctx.refresh()

    assert ctx.state == AccessState(identity=ANA, role=Role.admin, loading=False)


@pytest.mark.asyncio
async def test_refresh_picks_up_role_change(provider, directory) -> None:
    directory.docs["ana"] = {"role": "user"}
    ctx = _context(provider, directory)
    ctx.start()
    provider.emit(1, ANA)
    await ctx.settle()
    assert ctx.state.role is Role.user

    directory.docs["ana"]["role"] = "admin"
    await ctx.refresh()

    assert ctx.state.role is Role.admin


@pytest.mark.asyncio
async def test_sign_out_delegates_without_clearing_state(provider, directory) -> None:
    ctx = _context(provider, directory)
    ctx.start()
    provider.emit(1, ANA)
    await ctx.settle()

    await ctx.sign_out()

    assert provider.sign_out_calls == 1
    assert ctx.state.identity == ANA  # clears only on the resulting notification


@pytest.mark.asyncio
async def test_no_publish_after_close(provider, directory) -> None:
    gate = _gate(directory, "ana")
    ctx = _context(provider, directory)
    published: list[AccessState] = []
    ctx.subscribe(published.append)
    ctx.start()

    provider.emit(1, ANA)
    gate.set()
    await ctx.close()
    provider.emit(2, BIA)
    await ctx.settle()

    assert provider.listeners == []
    assert published == [AccessState()]
    assert ctx.state.loading


@pytest.mark.asyncio
async def test_failing_listener_does_not_block_others(provider, directory) -> None:
    ctx = _context(provider, directory)
    seen: list[AccessState] = []

    def broken(state: AccessState) -> None:
        if not state.loading:
            raise RuntimeError("widget crashed")

    ctx.subscribe(broken)
    ctx.subscribe(seen.append)
    ctx.start()
    provider.emit(1, None)

    assert seen[-1] == AccessState(loading=False)


@pytest.mark.asyncio
async def test_start_twice_is_rejected(provider, directory) -> None:
    ctx = _context(provider, directory)
    ctx.start()
    with pytest.raises(RuntimeError):
        ctx.start()
