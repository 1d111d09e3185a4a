"""
Tests for the recipient resolver, exercised directly against the database.

These tests verify:
  - Each identifier kind resolves on its own
  - When several identifiers are given, the chain order decides
  - Fuzzy matches prefer the earliest-registered user
  - Inactive accounts are not payable
  - Empty identifiers and misses raise the right errors
  - find_user() uses customer ID, mobile number, account number
"""

import pytest
from sqlalchemy import update

from neobank.exceptions import RecipientNotFoundError, UserNotFoundError, ValidationError
from neobank.models.account import BankAccount
from neobank.services import account_service, identity_service
from neobank.services.recipient_resolver import (
    RecipientIdentifiers,
    clean_mobile_number,
    find_user,
    resolve_recipient,
)


async def make_user(db, email, mobile_number=None, phone_number=None):
    user, _ = await identity_service.signup(
        db, email=email, password="SecurePass123!",
        mobile_number=mobile_number, phone_number=phone_number,
    )
    return user


async def make_account(db, user, balance_cents=0):
    return await account_service.create_account(
        db, user_id=user.id, bank_name="Bank", institution="Inst",
        opening_balance_cents=balance_cents,
    )


class TestSingleIdentifier:
    async def test_account_number(self, db_session):
        user = await make_user(db_session, "acct@example.com")
        account = await make_account(db_session, user)
        found = await resolve_recipient(
            db_session, RecipientIdentifiers(account_number=account.account_number)
        )
        assert found.id == user.id

    async def test_profile_url_exact(self, db_session):
        user = await make_user(db_session, "url@example.com")
        found = await resolve_recipient(db_session, RecipientIdentifiers(profile_url=user.public_url))
        assert found.id == user.id

    async def test_profile_url_trailing_segment_case_insensitive(self, db_session):
        user = await make_user(db_session, "slug@example.com")
        slug = user.public_url.rsplit("/", 1)[-1]
        found = await resolve_recipient(
            db_session,
            RecipientIdentifiers(profile_url=f"http://elsewhere.test/u/{slug.upper()}/"),
        )
        assert found.id == user.id

    async def test_customer_id(self, db_session):
        user = await make_user(db_session, "cust@example.com")
        found = await resolve_recipient(db_session, RecipientIdentifiers(public_id=user.customer_id))
        assert found.id == user.id

    async def test_customer_id_matches_profile_slug(self, db_session):
        user = await make_user(db_session, "cslug@example.com")
        slug = user.public_url.rsplit("/", 1)[-1]
        found = await resolve_recipient(db_session, RecipientIdentifiers(public_id=slug))
        assert found.id == user.id

    @pytest.mark.parametrize("typed", ["98765 43210", "(98765)-43210", "+9876543210"])
    async def test_mobile_number_formatting_is_ignored(self, db_session, typed):
        user = await make_user(db_session, "mobile@example.com", mobile_number="9876543210")
        found = await resolve_recipient(db_session, RecipientIdentifiers(mobile_number=typed))
        assert found.id == user.id

    async def test_phone_number_also_searched(self, db_session):
        user = await make_user(db_session, "phone@example.com", phone_number="+91-22-5551234")
        found = await resolve_recipient(db_session, RecipientIdentifiers(mobile_number="5551234"))
        assert found.id == user.id


class TestChainOrder:
    async def test_account_number_beats_customer_id(self, db_session):
        first = await make_user(db_session, "first@example.com")
        second = await make_user(db_session, "second@example.com")
        account = await make_account(db_session, second)

        found = await resolve_recipient(
            db_session,
            RecipientIdentifiers(public_id=first.customer_id, account_number=account.account_number),
        )
        assert found.id == second.id

    async def test_profile_url_beats_customer_id_and_mobile(self, db_session):
        by_mobile = await make_user(db_session, "bymobile@example.com", mobile_number="9811122233")
        by_url = await make_user(db_session, "byurl@example.com")
        by_customer_id = await make_user(db_session, "bycid@example.com")

        found = await resolve_recipient(
            db_session,
            RecipientIdentifiers(
                profile_url=by_url.public_url,
                public_id=by_customer_id.customer_id,
                mobile_number="9811122233",
            ),
        )
        assert found.id == by_url.id

    async def test_customer_id_beats_mobile(self, db_session):
        await make_user(db_session, "mobileonly@example.com", mobile_number="9811122233")
        by_customer_id = await make_user(db_session, "cidonly@example.com")

        found = await resolve_recipient(
            db_session,
            RecipientIdentifiers(public_id=by_customer_id.customer_id, mobile_number="9811122233"),
        )
        assert found.id == by_customer_id.id

    async def test_falls_through_to_next_identifier(self, db_session):
        user = await make_user(db_session, "fall@example.com", mobile_number="9000000001")
        found = await resolve_recipient(
            db_session,
            RecipientIdentifiers(account_number="0000000000", mobile_number="9000000001"),
        )
        assert found.id == user.id

    async def test_earliest_registered_wins_fuzzy_match(self, db_session):
        older = await make_user(db_session, "older@example.com", mobile_number="9876543210")
        await make_user(db_session, "newer@example.com", mobile_number="919876543210")
        found = await resolve_recipient(db_session, RecipientIdentifiers(mobile_number="9876543210"))
        assert found.id == older.id


class TestResolverErrors:
    async def test_all_empty(self, db_session):
        with pytest.raises(ValidationError):
            await resolve_recipient(db_session, RecipientIdentifiers(public_id=" ", mobile_number=""))

    async def test_not_found(self, db_session):
        await make_user(db_session, "someone@example.com")
        with pytest.raises(RecipientNotFoundError):
            await resolve_recipient(db_session, RecipientIdentifiers(public_id="CUST_MISSING1"))

    async def test_inactive_account_not_payable(self, db_session):
        user = await make_user(db_session, "closed@example.com")
        account = await make_account(db_session, user)
        await db_session.execute(
            update(BankAccount).where(BankAccount.id == account.id).values(is_active=False)
        )
        with pytest.raises(RecipientNotFoundError):
            await resolve_recipient(
                db_session, RecipientIdentifiers(account_number=account.account_number)
            )

    async def test_formatting_only_mobile_matches_nobody(self, db_session):
        await make_user(db_session, "blank@example.com", mobile_number="9876543210")
        with pytest.raises(RecipientNotFoundError):
            await resolve_recipient(db_session, RecipientIdentifiers(mobile_number="( - )"))


class TestFindUser:
    async def test_customer_id_then_mobile_then_account(self, db_session):
        user = await make_user(db_session, "lookup@example.com", mobile_number="9111111111")
        account = await make_account(db_session, user)

        for identifier in (user.customer_id, "91111 11111", account.account_number):
            found = await find_user(db_session, identifier)
            assert found.id == user.id

    async def test_not_found(self, db_session):
        with pytest.raises(UserNotFoundError):
            await find_user(db_session, "nobody")

    async def test_blank_identifier(self, db_session):
        with pytest.raises(UserNotFoundError):
            await find_user(db_session, "   ")


def test_clean_mobile_number():
    assert clean_mobile_number("+91 (987) 654-3210") == "919876543210"
