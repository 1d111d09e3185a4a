"""
Transfer service — peer-to-peer money movement.

THIS IS THE MOST CRITICAL FILE IN THE PROJECT. execute_transfer() walks one
request through a fixed sequence of stages; any stage can fail, and nothing
is written before the "Recorded" stage:

  Validated -> PinVerified -> RecipientResolved -> FundsChecked
            -> FeeComputed -> Recorded -> BalancesAdjusted -> Completed

Ordering constraints:
  - The PIN is verified BEFORE the recipient is looked up, so a caller
    without the PIN cannot use the transfer endpoint to probe whether an
    account number or phone number belongs to someone.
  - Every check runs before the first write.

Funds check vs. debit:
  The check compares the amount with the SUM of the sender's active
  balances, but only one account (the requested one, else the oldest) is
  debited. A requested account that is not one of the sender's active
  accounts is an AccountNotFoundError. The debit itself is a guarded atomic
  decrement, so if that one account cannot cover the amount — or a
  concurrent transfer spent the money first — the transfer fails with
  InsufficientFundsError instead of overdrawing.

  The aggregate-then-single-account split is kept on purpose. The
  consequence is that a sender whose balances add up to the amount can
  still be refused when the debited account alone is short. Letting that
  account go negative instead would break the rule that no balance is
  ever below zero, so the refusal is the accepted trade-off.

Fees:
  urgent: 2% capped at 100.00, high: 1% capped at 50.00, otherwise none.
  The fee is recorded on the sender's entry for information only. It is
  never deducted from any balance: the sender is debited exactly the
  transfer amount.

Atomicity:
  Both ledger entries and both balance changes are made inside the
  request's database transaction (see database.get_db). Any failure after
  the first write raises, and the whole request rolls back; storage errors
  are reported as InternalError.

Scheduled and recurring transfers are recorded with status "scheduled" /
"recurring" and move money immediately like instant ones; nothing executes
them again later.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from neobank.exceptions import (
    AccountNotFoundError,
    InsufficientFundsError,
    InternalError,
    InvalidPINError,
    UserNotFoundError,
    ValidationError,
)
from neobank.models.account import BankAccount
from neobank.models.transaction import Transaction
from neobank.models.user import User
from neobank.security import encrypt_value
from neobank.services import account_service, identity_service, transaction_service
from neobank.services.recipient_resolver import RecipientIdentifiers, resolve_recipient

logger = logging.getLogger(__name__)

# priority -> (rate, cap in cents)
FEE_SCHEDULE: dict[str, tuple[Decimal, int]] = {
    "urgent": (Decimal("0.02"), 100_00),
    "high": (Decimal("0.01"), 50_00),
}

DEFAULT_BANK_NAME = "Primary Account"
DEFAULT_INSTITUTION = "NeoBank"


@dataclass
class TransferCommand:
    """A validated transfer request, independent of the HTTP layer."""
    recipient: RecipientIdentifiers
    amount_cents: int
    category: str
    pin: str
    description: str | None = None
    transfer_type: str = "instant"
    priority: str = "normal"
    sender_account_id: uuid.UUID | None = None
    scheduled_date: datetime | None = None
    recurring_frequency: str | None = None
    recurring_end_date: datetime | None = None
    security_code: str | None = None


def compute_processing_fee(amount_cents: int, priority: str) -> int:
    """Fee in cents for the given priority, rounded half-up to the cent."""
    if priority not in FEE_SCHEDULE:
        return 0
    rate, cap_cents = FEE_SCHEDULE[priority]
    fee = (Decimal(amount_cents) * rate).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return min(int(fee), cap_cents)


def status_for_transfer_type(transfer_type: str) -> str:
    if transfer_type == "scheduled":
        return "scheduled"
    if transfer_type == "recurring":
        return "recurring"
    return "completed"


def _select_source_account(
    accounts: list[BankAccount],
    sender_account_id: uuid.UUID | None,
) -> BankAccount:
    if sender_account_id is None:
        return accounts[0]
    for account in accounts:
        if account.id == sender_account_id:
            return account
    raise AccountNotFoundError(sender_account_id)


async def _verify_pin(db: AsyncSession, requester_id: uuid.UUID, pin: str) -> User:
    sender = await identity_service.find_user_by_id(db, requester_id)
    if sender is None:
        raise UserNotFoundError()
    if not identity_service.verify_pin(sender, pin):
        logger.warning("Transfer refused for user %s: invalid PIN", requester_id)
        raise InvalidPINError()
    return sender


async def _credit_recipient(
    db: AsyncSession,
    recipient: User,
    amount_cents: int,
) -> BankAccount:
    """Credit the recipient's oldest active account, opening one if they have none."""
    accounts = await account_service.list_active_accounts(db, recipient.id)
    if not accounts:
        account = await account_service.create_account(
            db,
            user_id=recipient.id,
            bank_name=DEFAULT_BANK_NAME,
            institution=DEFAULT_INSTITUTION,
            opening_balance_cents=amount_cents,
        )
        logger.info("Opened default account %s for recipient %s", account.id, recipient.id)
        return account

    account = accounts[0]
    if await account_service.adjust_balance(db, account.id, amount_cents) is None:
        raise InternalError(f"Could not credit account {account.id}")
    return account


async def execute_transfer(
    db: AsyncSession,
    requester_id: uuid.UUID,
    command: TransferCommand,
) -> Transaction:
    """
    Send money from the requester to the resolved recipient.

    Args:
        db: Database session (the request's transaction).
        requester_id: The authenticated sender.
        command: The validated transfer request.

    Returns:
        The sender's "sent" ledger entry.

    Raises:
        ValidationError: Empty recipient identifiers, self-transfer, or no
            active account.
        InvalidPINError: The PIN is wrong or was never set.
        UserNotFoundError: The requester no longer exists.
        RecipientNotFoundError: No user matches the identifiers.
        AccountNotFoundError: The requested sender account is not one of
            the requester's active accounts.
        InsufficientFundsError: Aggregate balance, or the debited account,
            cannot cover the amount.
        InternalError: A storage failure after writing started.
    """
    amount = command.amount_cents

    # --- PinVerified ---
    sender = await _verify_pin(db, requester_id, command.pin)

    # --- RecipientResolved ---
    recipient = await resolve_recipient(db, command.recipient)
    if recipient.id == sender.id:
        raise ValidationError("Cannot transfer to yourself")

    # --- FundsChecked ---
    sender_accounts = await account_service.list_active_accounts(db, sender.id)
    if not sender_accounts:
        raise ValidationError("No active bank accounts found")

    total_balance = sum(account.balance_cents for account in sender_accounts)
    if total_balance < amount:
        raise InsufficientFundsError(requested_cents=amount, available_cents=total_balance)

    source = _select_source_account(sender_accounts, command.sender_account_id)

    # --- FeeComputed ---
    fee_cents = compute_processing_fee(amount, command.priority)
    status = status_for_transfer_type(command.transfer_type)
    transfer_pair_id = uuid.uuid4()

    logger.info(
        "Transfer %s: %d cents from user %s to user %s (priority=%s, type=%s)",
        transfer_pair_id, amount, sender.id, recipient.id, command.priority, command.transfer_type,
    )

    try:
        # --- Recorded ---
        sent = await transaction_service.record_transaction(
            db,
            user_id=sender.id,
            related_user_id=recipient.id,
            amount_cents=amount,
            category=command.category,
            description=command.description or f"Transfer to {recipient.name or recipient.email}",
            status=status,
            transaction_type=command.transfer_type,
            direction="sent",
            priority=command.priority,
            processing_fee_cents=fee_cents,
            scheduled_date=command.scheduled_date,
            recurring_frequency=command.recurring_frequency,
            recurring_end_date=command.recurring_end_date,
            encrypted_security_code=(
                encrypt_value(command.security_code) if command.security_code else None
            ),
            sender_account_id=source.id,
            transfer_pair_id=transfer_pair_id,
        )
        received = await transaction_service.record_transaction(
            db,
            user_id=recipient.id,
            related_user_id=sender.id,
            amount_cents=amount,
            category="Transfers",
            description=f"Payment from {sender.name or sender.email}",
            status="completed",
            transaction_type="deposit",
            direction="received",
            priority=command.priority,
            processing_fee_cents=0,
            sender_account_id=source.id,
            transfer_pair_id=transfer_pair_id,
        )

        # --- BalancesAdjusted ---
        if await account_service.adjust_balance(db, source.id, -amount) is None:
            logger.warning(
                "Transfer %s: account %s could not cover %d cents", transfer_pair_id, source.id, amount
            )
            raise InsufficientFundsError(requested_cents=amount, available_cents=source.balance_cents)

        destination = await _credit_recipient(db, recipient, amount)
        sent.recipient_account_id = destination.id
        received.recipient_account_id = destination.id
        await db.flush()
    except SQLAlchemyError as exc:
        logger.exception("Transfer %s failed while writing", transfer_pair_id)
        raise InternalError(f"Transfer {transfer_pair_id} could not be recorded: {exc}") from exc

    # --- Completed ---
    logger.info(
        "Transfer %s completed: %s (sent) / %s (received), fee %d cents",
        transfer_pair_id, sent.transaction_id, received.transaction_id, fee_cents,
    )
    return sent
