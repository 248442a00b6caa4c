"""Contract tests for commit, rollback and conflict detection.

Conflicts are provoked with two units of work over the same store: the second
one writes against a version the first has already moved on from.
"""

from __future__ import annotations

import pytest

from accountcore.domain.users import UserRole
from accountcore.interfaces.errors import ConcurrencyConflictError

# pylint: disable=redefined-outer-name


@pytest.fixture
def saved_user(uow_factory, saved_tenant, make_user):
    """A user of `saved_tenant` committed to the store."""
    user = make_user(saved_tenant, "ada@example.com")
    with uow_factory() as uow:
        uow.users.add(user)
        uow.commit()
    return user


class TestCommitAndRollback:
    """Staged writes reach storage on commit only."""

    @staticmethod
    def test_commit_persists(uow_factory, saved_tenant, token):
        with uow_factory() as uow:
            assert uow.tenants.get_by_id(saved_tenant.id, token) == saved_tenant

    @staticmethod
    def test_leaving_without_commit_discards(uow_factory, make_tenant, token):
        tenant = make_tenant()
        with uow_factory() as uow:
            uow.tenants.add(tenant)

        with uow_factory() as uow:
            assert uow.tenants.get_by_id(tenant.id, token) is None

    @staticmethod
    def test_explicit_rollback_discards(uow_factory, make_tenant, token):
        tenant = make_tenant()
        with uow_factory() as uow:
            uow.tenants.add(tenant)
            uow.rollback()
            assert not uow.changes
            assert uow.tenants.get_by_id(tenant.id, token) is None

    @staticmethod
    def test_exception_inside_context_discards(uow_factory, make_tenant, token):
        class Boom(Exception):
            """Raised from inside the unit of work."""

        tenant = make_tenant()
        with pytest.raises(Boom), uow_factory() as uow:
            uow.tenants.add(tenant)
            raise Boom()

        with uow_factory() as uow:
            assert uow.tenants.get_by_id(tenant.id, token) is None

    @staticmethod
    def test_commit_clears_change_set(uow_factory, make_tenant):
        with uow_factory() as uow:
            uow.tenants.add(make_tenant())
            uow.commit()
            assert len(uow.changes) == 0

    @staticmethod
    def test_tenant_and_user_in_one_commit(uow_factory, make_tenant, make_user, token):
        tenant = make_tenant()
        user = make_user(tenant)
        with uow_factory() as uow:
            uow.tenants.add(tenant)
            uow.users.add(user)
            uow.commit()

        with uow_factory() as uow:
            assert uow.users.get_by_id(user.id, token).tenant_id == tenant.id


class TestVersions:
    """The version token starts at 1 and advances on every committed update."""

    @staticmethod
    def test_add_sets_version_one(uow_factory, make_tenant):
        tenant = make_tenant()
        with uow_factory() as uow:
            uow.tenants.add(tenant)
            assert tenant.version == 0
            uow.commit()
        assert tenant.version == 1

    @staticmethod
    def test_update_advances_version(uow_factory, saved_user, token):
        with uow_factory() as uow:
            user = uow.users.get_by_id(saved_user.id, token)
            user.update("Ada", "Lovelace", "Countess")
            uow.users.update(user)
            uow.commit()
        assert user.version == 2

        with uow_factory() as uow:
            loaded = uow.users.get_by_id(saved_user.id, token)
        assert loaded.version == 2
        assert (loaded.first_name, loaded.last_name, loaded.title) == (
            "Ada",
            "Lovelace",
            "Countess",
        )

    @staticmethod
    def test_discarded_update_keeps_version(uow_factory, saved_user, token):
        with uow_factory() as uow:
            user = uow.users.get_by_id(saved_user.id, token)
            user.change_role(UserRole.TENANT_OWNER)
            uow.users.update(user)
        assert user.version == 1


class TestConflicts:
    """Stale and colliding writes raise and leave storage untouched."""

    @staticmethod
    def test_stale_update(uow_factory, saved_user, token):
        with uow_factory() as first, uow_factory() as second:
            mine = first.users.get_by_id(saved_user.id, token)
            theirs = second.users.get_by_id(saved_user.id, token)

            theirs.change_role(UserRole.TENANT_ADMIN)
            second.users.update(theirs)
            second.commit()

            mine.change_role(UserRole.TENANT_OWNER)
            first.users.update(mine)
            with pytest.raises(ConcurrencyConflictError):
                first.commit()

        assert mine.version == 1
        with uow_factory() as uow:
            assert uow.users.get_by_id(saved_user.id, token).role is UserRole.TENANT_ADMIN

    @staticmethod
    def test_stale_remove(uow_factory, saved_user, token):
        with uow_factory() as first, uow_factory() as second:
            mine = first.users.get_by_id(saved_user.id, token)
            theirs = second.users.get_by_id(saved_user.id, token)

            theirs.update("Ada", None, None)
            second.users.update(theirs)
            second.commit()

            first.users.remove(mine)
            with pytest.raises(ConcurrencyConflictError):
                first.commit()

        with uow_factory() as uow:
            assert uow.users.get_by_id(saved_user.id, token) is not None

    @staticmethod
    def test_update_of_removed_row(uow_factory, saved_user, token):
        with uow_factory() as first, uow_factory() as second:
            mine = first.users.get_by_id(saved_user.id, token)
            second.users.remove(second.users.get_by_id(saved_user.id, token))
            second.commit()

            mine.update("Ada", None, None)
            first.users.update(mine)
            with pytest.raises(ConcurrencyConflictError):
                first.commit()

    @staticmethod
    def test_remove_of_removed_row_is_noop(uow_factory, saved_user, token):
        with uow_factory() as first, uow_factory() as second:
            mine = first.users.get_by_id(saved_user.id, token)
            second.users.remove(second.users.get_by_id(saved_user.id, token))
            second.commit()

            first.users.remove(mine)
            first.commit()

        with uow_factory() as uow:
            assert uow.users.get_by_id(saved_user.id, token) is None

    @staticmethod
    def test_duplicate_email_in_tenant(uow_factory, saved_tenant, saved_user, make_user, token):
        clash = make_user(saved_tenant, "ADA@example.com")
        with uow_factory() as uow:
            uow.users.add(clash)
            with pytest.raises(ConcurrencyConflictError):
                uow.commit()

        with uow_factory() as uow:
            assert uow.users.get_by_id(clash.id, token) is None

    @staticmethod
    def test_same_email_in_other_tenant(uow_factory, saved_user, make_tenant, make_user, token):
        other = make_tenant("Other")
        user = make_user(other, saved_user.email)
        with uow_factory() as uow:
            uow.tenants.add(other)
            uow.users.add(user)
            uow.commit()

        with uow_factory() as uow:
            assert uow.users.get_by_id(user.id, token) is not None

    @staticmethod
    def test_duplicate_id(uow_factory, saved_tenant, make_tenant):
        copy = make_tenant("Copy")
        copy.id = saved_tenant.id
        with uow_factory() as uow:
            uow.tenants.add(copy)
            with pytest.raises(ConcurrencyConflictError):
                uow.commit()

    @staticmethod
    def test_user_of_unknown_tenant(uow_factory, make_tenant, make_user):
        with uow_factory() as uow:
            uow.users.add(make_user(make_tenant()))
            with pytest.raises(ConcurrencyConflictError):
                uow.commit()

    @staticmethod
    def test_tenant_with_users_cannot_be_removed(uow_factory, saved_tenant, saved_user, token):
        with uow_factory() as uow:
            uow.tenants.remove(uow.tenants.get_by_id(saved_tenant.id, token))
            with pytest.raises(ConcurrencyConflictError):
                uow.commit()

        with uow_factory() as uow:
            assert uow.tenants.get_by_id(saved_tenant.id, token) is not None

    @staticmethod
    def test_tenant_and_its_users_removed_together(uow_factory, saved_tenant, saved_user, token):
        with uow_factory() as uow:
            uow.users.remove(uow.users.get_by_id(saved_user.id, token))
            uow.tenants.remove(uow.tenants.get_by_id(saved_tenant.id, token))
            uow.commit()

        with uow_factory() as uow:
            assert uow.tenants.get_by_id(saved_tenant.id, token) is None

    @staticmethod
    def test_failed_commit_writes_nothing(uow_factory, saved_user, make_tenant, make_user, token):
        """A conflict on one staged change discards the whole change set."""
        fresh = make_tenant("Fresh")
        newcomer = make_user(fresh, saved_user.email)
        duplicate = make_user(fresh)
        duplicate.id = saved_user.id
        with uow_factory() as uow:
            uow.tenants.add(fresh)
            uow.users.add(newcomer)
            uow.users.add(duplicate)
            with pytest.raises(ConcurrencyConflictError):
                uow.commit()

        with uow_factory() as uow:
            assert uow.tenants.get_by_id(fresh.id, token) is None
            assert uow.users.get_by_id(newcomer.id, token) is None
