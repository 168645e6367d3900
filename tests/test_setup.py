"""Startup tasks: index creation and the seed authority account."""

import pytest

from civiclens.common.config.settings import settings
from civiclens.common.security.password import verify_password
from civiclens.infrastructure.setup.initial_setup import ensure_indexes, setup_authority


async def test_ensure_indexes_runs(reports_repo, duplicates_repo, users_repo, notifications_repo):
    await ensure_indexes(reports_repo, duplicates_repo, users_repo, notifications_repo)


async def test_seed_authority_created_once(users_repo, monkeypatch):
    monkeypatch.setattr(settings, "AUTHORITY_EMAIL", "Authority@City.gov")
    monkeypatch.setattr(settings, "AUTHORITY_PASSWORD", "s3cure-password")

    await setup_authority(users_repo)
    await setup_authority(users_repo)

    assert len(users_repo.docs) == 1
    authority = users_repo.docs[0]
    assert authority["email"] == "authority@city.gov"
    assert authority["role"] == "authority"
    assert verify_password("s3cure-password", authority["password"])


async def test_no_seed_without_email(users_repo, monkeypatch):
    monkeypatch.setattr(settings, "AUTHORITY_EMAIL", "")
    await setup_authority(users_repo)
    assert users_repo.docs == []


async def test_short_seed_password_refused(users_repo, monkeypatch):
    monkeypatch.setattr(settings, "AUTHORITY_EMAIL", "authority@city.gov")
    monkeypatch.setattr(settings, "AUTHORITY_PASSWORD", "short")
    with pytest.raises(ValueError):
        await setup_authority(users_repo)
