"""
tests.test_provisioner

Privileged User Provisioner: precondition order, no side effects on denial,
error-kind mapping and compensation on partial failure.
"""

from __future__ import annotations

import pytest
from conftest import FakeDirectory, FakeIdentities, RecordingAudit

from mutamba_erp.auth.models import Identity
from mutamba_erp.errors import (
    AlreadyExists,
    Internal,
    InvalidArgument,
    PermissionDenied,
    Unauthenticated,
)
from mutamba_erp.provisioning.service import UserProvisioner
from mutamba_erp.rbac.resolver import RoleResolver

SUPER = "boss@mutamba.test"
ADMIN = Identity(uid="adm", email="adm@mutamba.test")
PLAIN = Identity(uid="usr", email="usr@mutamba.test")
VALID = {"email": "a@b.com", "password": "secret1", "nome": "Ana"}


@pytest.fixture
def seeded(directory: FakeDirectory) -> FakeDirectory:
    directory.docs["adm"] = {"role": "admin", "email": ADMIN.email}
    directory.docs["usr"] = {"role": "user", "email": PLAIN.email, "nome": "Usr"}
    return directory


@pytest.fixture
def provisioner(
    seeded: FakeDirectory, identities: FakeIdentities, audit: RecordingAudit
) -> UserProvisioner:
    return UserProvisioner(
        resolver=RoleResolver(directory=seeded, super_admin_email=SUPER),
        identities=identities,
        directory=seeded,
        audit=audit,
    )


@pytest.mark.asyncio
async def test_unauthenticated_wins_over_invalid_payload(provisioner, identities, seeded) -> None:
    with pytest.raises(Unauthenticated):
        await provisioner.create_user(None, {})
    assert identities.created == []
    assert seeded.writes == []


@pytest.mark.asyncio
@pytest.mark.parametrize("data", [VALID, {}, {"email": 1}])
async def test_non_admin_is_denied_without_side_effects(
    provisioner, identities, seeded, audit, data
) -> None:
    with pytest.raises(PermissionDenied):
        await provisioner.create_user(PLAIN, data)
    assert identities.created == []
    assert seeded.writes == []
    assert audit.events == []


@pytest.mark.asyncio
async def test_caller_without_directory_entry_is_denied(provisioner) -> None:
    with pytest.raises(PermissionDenied):
        await provisioner.create_user(Identity(uid="ghost", email="g@h.com"), VALID)


@pytest.mark.asyncio
async def test_payload_cannot_assert_caller_role(provisioner, identities) -> None:
    data = {**VALID, "callerRole": "admin", "uid": "adm", "auth": {"uid": "adm"}}
    with pytest.raises(PermissionDenied):
        await provisioner.create_user(PLAIN, data)
    assert identities.created == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "data",
    [
        {"password": "secret1", "nome": "Ana"},
        {"email": "a@b.com", "nome": "Ana"},
        {"email": "a@b.com", "password": "secret1"},
        {"email": "  ", "password": "secret1", "nome": "Ana"},
        {"email": 5, "password": "secret1", "nome": "Ana"},
        {**VALID, "role": "owner"},
    ],
)
async def test_invalid_argument_for_admin(provisioner, identities, data) -> None:
    with pytest.raises(InvalidArgument):
        await provisioner.create_user(ADMIN, data)
    assert identities.created == []


@pytest.mark.asyncio
async def test_admin_creates_user_with_default_role(provisioner, seeded, audit) -> None:
    result = await provisioner.create_user(ADMIN, VALID)

    assert result.uid
    assert result.result == "Usuário Ana (a@b.com) criado com sucesso."
    assert seeded.count_email("a@b.com") == 1
    doc = seeded.docs[result.uid]
    assert doc["role"] == "user"
    assert doc["nome"] == "Ana"
    assert doc["dataCriacao"] is not None
    assert audit.events[-1]["event_type"] == "USER_PROVISIONED"
    assert audit.events[-1]["actor"] == "adm"


@pytest.mark.asyncio
async def test_super_admin_creates_admin(provisioner, seeded) -> None:
    boss = Identity(uid="boss", email=SUPER)
    result = await provisioner.create_user(boss, {**VALID, "role": "admin"})
    assert seeded.docs[result.uid]["role"] == "admin"


@pytest.mark.asyncio
async def test_duplicate_email_is_already_exists(provisioner, seeded) -> None:
    await provisioner.create_user(ADMIN, VALID)
    with pytest.raises(AlreadyExists):
        await provisioner.create_user(ADMIN, VALID)
    assert seeded.count_email("a@b.com") == 1


@pytest.mark.asyncio
async def test_identity_failure_is_internal(provisioner, identities, seeded) -> None:
    identities.fail_create = True
    with pytest.raises(Internal) as exc_info:
        await provisioner.create_user(ADMIN, VALID)
    assert isinstance(exc_info.value.cause, RuntimeError)
    assert seeded.writes == []


@pytest.mark.asyncio
async def test_directory_failure_compensates_identity(provisioner, identities, seeded) -> None:
    seeded.fail_writes = True
    with pytest.raises(Internal):
        await provisioner.create_user(ADMIN, VALID)

    assert [i.uid for i in identities.created] == identities.deleted
    assert "a@b.com" not in identities.by_email

    # The email is free again, so a retry succeeds.
    seeded.fail_writes = False
    result = await provisioner.create_user(ADMIN, VALID)
    assert seeded.count_email("a@b.com") == 1
    assert result.uid not in identities.deleted


@pytest.mark.asyncio
async def test_caller_role_lookup_failure_is_internal(provisioner, seeded, identities) -> None:
    seeded.fail_reads = True
    with pytest.raises(Internal):
        await provisioner.create_user(ADMIN, VALID)
    assert identities.created == []


@pytest.mark.asyncio
async def test_set_user_role_promotes_target(provisioner, seeded, audit) -> None:
    result = await provisioner.set_user_role(ADMIN, {"uid": "usr", "role": "admin"})

    assert result.role == "admin"
    assert seeded.writes == [("usr", {"role": "admin"})]
    assert seeded.docs["usr"]["nome"] == "Usr"
    assert audit.events[-1]["details"] == {"previous": "user", "role": "admin"}


@pytest.mark.asyncio
async def test_set_user_role_requires_admin(provisioner, seeded) -> None:
    with pytest.raises(Unauthenticated):
        await provisioner.set_user_role(None, {"uid": "usr", "role": "admin"})
    with pytest.raises(PermissionDenied):
        await provisioner.set_user_role(PLAIN, {"uid": "usr", "role": "admin"})
    assert seeded.writes == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "data",
    [
        {"uid": "adm", "role": "user"},  # own role
        {"uid": "nobody", "role": "admin"},
        {"uid": "usr", "role": "root"},
        {"uid": "", "role": "admin"},
        {"role": "admin"},
    ],
)
async def test_set_user_role_invalid_arguments(provisioner, seeded, data) -> None:
    with pytest.raises(InvalidArgument):
        await provisioner.set_user_role(ADMIN, data)
    assert seeded.writes == []


@pytest.mark.asyncio
async def test_audit_failure_does_not_fail_provisioning(seeded, identities) -> None:
    class BrokenAudit:
        async def record(self, **_: object) -> None:
            raise RuntimeError("audit down")

    provisioner = UserProvisioner(
        resolver=RoleResolver(directory=seeded, super_admin_email=SUPER),
        identities=identities,
        directory=seeded,
        audit=BrokenAudit(),
    )
    result = await provisioner.create_user(ADMIN, VALID)
    assert result.uid in seeded.docs
