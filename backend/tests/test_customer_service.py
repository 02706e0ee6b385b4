"""
Test per CustomerService: assegnazione ruoli (upsert) e modifiche
anagrafiche in un'unica transazione.
"""

import uuid

import pytest
from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError

from bengkel.api.v1.customers import router as customers_router
from bengkel.core.deps import require_role
from bengkel.core.exceptions import (
    AuthorizationError,
    BusinessValidationError,
    ConflictError,
    NotFoundError,
)
from bengkel.models import AppRole, UserRole
from bengkel.schemas.user import CustomerUpdate
from bengkel.services.customer_service import customer_service

from conftest import MockProfile, MockRole, MockUser


class TestSetRole:
    """Test assegnazione ruolo."""

    @pytest.mark.asyncio
    async def test_updates_existing_role_in_place(self, mock_db, make_result, owner_user):
        """Test la riga ruolo viene aggiornata, mai cancellata e ricreata."""
        user_id = uuid.uuid4()
        assignment = MockRole(user_id, role="customer")
        mock_db.execute.side_effect = [
            make_result(scalar=user_id),
            make_result(scalar=assignment),
        ]

        role = await customer_service.set_role(mock_db, user_id, AppRole.STAFF, owner_user)

        assert role == AppRole.STAFF
        assert assignment.role == "staff"
        mock_db.add.assert_not_called()
        mock_db.delete.assert_not_awaited()
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_inserts_missing_role(self, mock_db, make_result, owner_user):
        user_id = uuid.uuid4()
        mock_db.execute.side_effect = [
            make_result(scalar=user_id),
            make_result(scalar=None),
        ]

        await customer_service.set_role(mock_db, user_id, AppRole.OWNER, owner_user)

        added = mock_db.add.call_args.args[0]
        assert isinstance(added, UserRole)
        assert added.user_id == user_id
        assert added.role == "owner"
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_only_owner(self, mock_db, staff_user):
        with pytest.raises(AuthorizationError):
            await customer_service.set_role(mock_db, uuid.uuid4(), AppRole.OWNER, staff_user)

        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_account(self, mock_db, make_result, owner_user):
        mock_db.execute.return_value = make_result(scalar=None)

        with pytest.raises(NotFoundError):
            await customer_service.set_role(mock_db, uuid.uuid4(), AppRole.STAFF, owner_user)

        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_concurrent_insert_conflict(self, mock_db, make_result, owner_user):
        user_id = uuid.uuid4()
        mock_db.execute.side_effect = [make_result(scalar=user_id), make_result(scalar=None)]
        mock_db.commit.side_effect = IntegrityError("INSERT", {}, Exception("unique user_id"))

        with pytest.raises(ConflictError):
            await customer_service.set_role(mock_db, user_id, AppRole.STAFF, owner_user)

        mock_db.rollback.assert_awaited_once()


class TestUpdateCustomer:

    @pytest.mark.asyncio
    async def test_profile_and_role_single_commit(self, mock_db, make_result, owner_user):
        profile = MockProfile(name="Budi")
        assignment = MockRole(profile.user_id)
        mock_db.execute.side_effect = [
            make_result(scalar=profile),
            make_result(scalar=assignment),
        ]

        result = await customer_service.update(
            mock_db,
            profile.user_id,
            CustomerUpdate(name="Budi Santoso", role=AppRole.STAFF),
            owner_user,
        )

        assert profile.name == "Budi Santoso"
        assert assignment.role == "staff"
        assert result.role == AppRole.STAFF
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_staff_cannot_change_role(self, mock_db, make_result, staff_user):
        profile = MockProfile()
        mock_db.execute.return_value = make_result(scalar=profile)

        with pytest.raises(AuthorizationError):
            await customer_service.update(
                mock_db, profile.user_id, CustomerUpdate(role=AppRole.OWNER), staff_user
            )

        mock_db.commit.assert_not_awaited()


class TestDeleteCustomer:

    @pytest.mark.asyncio
    async def test_delete_in_single_commit(self, mock_db, make_result, owner_user):
        """Test ruolo e profilo eliminati insieme, account disattivato."""
        profile = MockProfile()
        assignment = MockRole(profile.user_id)
        account = MockUser(id=profile.user_id, role="customer")
        mock_db.execute.side_effect = [
            make_result(scalar=profile),
            make_result(scalar=assignment),
            make_result(scalar=account),
        ]

        await customer_service.delete(mock_db, profile.user_id, owner_user)

        deleted = [call.args[0] for call in mock_db.delete.await_args_list]
        assert deleted == [assignment, profile]
        assert account.is_active is False
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_cannot_delete_self(self, mock_db, owner_user):
        with pytest.raises(BusinessValidationError):
            await customer_service.delete(mock_db, owner_user.id, owner_user)

    @pytest.mark.asyncio
    async def test_staff_cannot_delete_owner(self, mock_db, make_result, staff_user):
        """Test lo staff non può eliminare né disattivare un owner."""
        profile = MockProfile()
        owner_account = MockUser(id=profile.user_id, role="owner")
        mock_db.execute.side_effect = [
            make_result(scalar=profile),
            make_result(scalar=MockRole(profile.user_id, role="owner")),
            make_result(scalar=owner_account),
        ]

        with pytest.raises(AuthorizationError):
            await customer_service.delete(mock_db, profile.user_id, staff_user)

        assert owner_account.is_active is True
        mock_db.execute.assert_not_awaited()
        mock_db.delete.assert_not_awaited()
        mock_db.commit.assert_not_awaited()


class TestOwnerOnlyRoutes:
    """Test dipendenze di ruolo delle route riservate agli owner."""

    @pytest.mark.asyncio
    async def test_owner_dependency_rejects_staff(self, staff_user):
        checker = require_role(AppRole.OWNER)

        with pytest.raises(HTTPException) as exc_info:
            await checker(current_user=staff_user)

        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_delete_route_requires_owner(self, staff_user, owner_user):
        route = next(
            r for r in customers_router.routes
            if r.path == "/customers/{user_id}" and "DELETE" in r.methods
        )
        checker = next(
            d.call for d in route.dependant.dependencies if d.name == "current_user"
        )

        with pytest.raises(HTTPException) as exc_info:
            await checker(current_user=staff_user)

        assert exc_info.value.status_code == 403
        assert await checker(current_user=owner_user) is owner_user
