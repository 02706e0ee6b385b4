"""
Test per configurazione, sicurezza (password e JWT) e registrazione
degli account.
"""

import uuid
from unittest.mock import patch

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from bengkel.core.config import Settings
from bengkel.core.exceptions import AuthorizationError, DuplicateError
from bengkel.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)
from bengkel.models import AppRole
from bengkel.schemas.user import UserCreate
from bengkel.services.auth_service import auth_service

from conftest import MockUser


# ============================================================
# Configurazione
# ============================================================


class TestSettings:

    def test_invoice_prefix_normalized(self):
        settings = Settings(_env_file=None, invoice_number_prefix=" fak ")
        assert settings.invoice_number_prefix == "FAK"

    def test_invoice_prefix_without_separator(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, invoice_number_prefix="INV/2024")

    def test_production_requires_real_secret(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, app_env="production")

    def test_production_valid(self):
        settings = Settings(
            _env_file=None,
            app_env="production",
            secret_key="x" * 40,
            database_url="postgresql+asyncpg://bengkel:s3cret@db:5432/bengkel",
            cors_origins=["https://bengkel.example.com"],
        )
        assert settings.is_production


# ============================================================
# Password e token
# ============================================================


class TestSecurity:

    def test_password_hash(self):
        hashed = hash_password("rahasia123")

        assert hashed != "rahasia123"
        assert verify_password("rahasia123", hashed)
        assert not verify_password("salah12345", hashed)

    def test_access_token_roundtrip(self):
        user_id = str(uuid.uuid4())

        payload = decode_token(create_access_token(user_id, "staff"))

        assert payload.sub == user_id
        assert payload.role == "staff"
        assert payload.type == "access"

    def test_refresh_token_type(self):
        payload = decode_token(create_refresh_token(str(uuid.uuid4()), "customer"))
        assert payload.type == "refresh"

    def test_invalid_token(self):
        with pytest.raises(HTTPException) as exc_info:
            decode_token("non-un-token")

        assert exc_info.value.status_code == 401


# ============================================================
# Registrazione
# ============================================================


HASH = "bengkel.services.auth_service.hash_password"


def _user_create(role=AppRole.CUSTOMER):
    return UserCreate(
        email="budi@example.com",
        password="rahasia123",
        name="  Budi Santoso ",
        role=role,
    )


class TestRegister:
    """Test regole di assegnazione ruolo in registrazione."""

    @pytest.mark.asyncio
    async def test_first_account_is_owner(self, mock_db, make_result):
        mock_db.execute.side_effect = [make_result(scalar=None), make_result(scalar=0)]

        with patch(HASH, return_value="hashed"):
            user = await auth_service.register(mock_db, _user_create())

        assert user.role_assignment.role == "owner"
        assert user.profile.name == "Budi Santoso"
        assert user.hashed_password == "hashed"
        mock_db.add.assert_called_once_with(user)

    @pytest.mark.asyncio
    async def test_self_registration_is_customer(self, mock_db, make_result):
        mock_db.execute.side_effect = [make_result(scalar=None), make_result(scalar=3)]

        with patch(HASH, return_value="hashed"):
            user = await auth_service.register(mock_db, _user_create())

        assert user.role_assignment.role == "customer"

    @pytest.mark.asyncio
    async def test_staff_requires_owner(self, mock_db, make_result):
        mock_db.execute.side_effect = [make_result(scalar=None), make_result(scalar=3)]

        with pytest.raises(AuthorizationError):
            await auth_service.register(
                mock_db, _user_create(AppRole.STAFF), MockUser(role="staff")
            )

        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_owner_creates_staff(self, mock_db, make_result):
        mock_db.execute.side_effect = [make_result(scalar=None), make_result(scalar=3)]

        with patch(HASH, return_value="hashed"):
            user = await auth_service.register(
                mock_db, _user_create(AppRole.STAFF), MockUser(role="owner")
            )

        assert user.role_assignment.role == "staff"

    @pytest.mark.asyncio
    async def test_duplicate_email(self, mock_db, make_result):
        mock_db.execute.return_value = make_result(scalar=MockUser())

        with pytest.raises(DuplicateError):
            await auth_service.register(mock_db, _user_create())
