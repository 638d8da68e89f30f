"""Wallet service: balance changes and the transaction ledger."""

from typing import List, Optional

import structlog

from tourney_api.adapters.database.manager import DatabaseManager
from tourney_api.adapters.observability import MetricsProvider, get_metrics_provider
from tourney_api.core.entities import Wallet, Transaction
from tourney_api.core.enums import TransactionType, TransactionStatus
from tourney_api.core.errors import NotFoundError, TourneyAPIError
from tourney_api.core.money import AmountLike, parse_positive_amount

logger = structlog.get_logger()


class WalletService:
    """Applies balance changes and records them in the ledger.

    Each operation is a single store call that updates the balance with an
    atomic arithmetic expression and inserts the ledger entry in the same
    database transaction.
    """

    def __init__(self, db_manager: DatabaseManager, metrics: Optional[MetricsProvider] = None):
        """Initialize the wallet service.

        Args:
            db_manager: Database manager for direct repository access
            metrics: Optional metrics provider; falls back to the global one
        """
        self.db_manager = db_manager
        self.metrics = metrics or get_metrics_provider()

    async def get_wallet(self, user_id: int) -> Wallet:
        """Get a user's wallet.

        Raises:
            NotFoundError: If the user has no wallet
        """
        wallet = await self.db_manager.get_wallet(user_id)
        if wallet is None:
            raise NotFoundError("Wallet not found")
        return wallet

    async def deposit(
        self,
        user_id: int,
        amount: AmountLike,
        payment_id: Optional[str] = None,
        payment_method: Optional[str] = None,
    ) -> Wallet:
        """Add funds to the withdrawable balance.

        The ledger entry is written as completed.

        Raises:
            ValidationError: If the amount is not a positive decimal
            NotFoundError: If the user has no wallet
        """
        value = parse_positive_amount(amount)
        wallet, transaction = await self._apply(
            self.db_manager.credit_wallet(
                user_id,
                value,
                TransactionType.DEPOSIT,
                TransactionStatus.COMPLETED,
                payment_id=payment_id,
                payment_method=payment_method,
                description=f"Deposit of {value}",
            ),
            user_id,
            TransactionType.DEPOSIT,
        )
        logger.info(
            "Wallet deposit completed",
            user_id=user_id,
            amount=str(value),
            balance=str(wallet.balance),
            transaction_id=transaction.id,
            payment_method=payment_method,
        )
        return wallet

    async def withdraw(self, user_id: int, amount: AmountLike) -> Wallet:
        """Remove funds from the withdrawable balance.

        The ledger entry stays pending until paid out by the external
        settlement process.

        Raises:
            ValidationError: If the amount is not a positive decimal
            NotFoundError: If the user has no wallet
            InsufficientFundsError: If the balance does not cover the amount
        """
        value = parse_positive_amount(amount)
        wallet, transaction = await self._apply(
            self.db_manager.debit_wallet(
                user_id,
                value,
                TransactionType.WITHDRAWAL,
                TransactionStatus.PENDING,
                description=f"Withdrawal of {value}",
            ),
            user_id,
            TransactionType.WITHDRAWAL,
        )
        logger.info(
            "Wallet withdrawal requested",
            user_id=user_id,
            amount=str(value),
            balance=str(wallet.balance),
            transaction_id=transaction.id,
        )
        return wallet

    async def award_winnings(
        self, user_id: int, amount: AmountLike, description: Optional[str] = None
    ) -> Wallet:
        """Credit tournament winnings to the withdrawable balance."""
        value = parse_positive_amount(amount)
        wallet, transaction = await self._apply(
            self.db_manager.credit_wallet(
                user_id,
                value,
                TransactionType.WIN,
                TransactionStatus.COMPLETED,
                description=description or f"Winnings of {value}",
            ),
            user_id,
            TransactionType.WIN,
        )
        logger.info(
            "Winnings credited",
            user_id=user_id,
            amount=str(value),
            transaction_id=transaction.id,
        )
        return wallet

    async def grant_bonus(
        self, user_id: int, amount: AmountLike, description: Optional[str] = None
    ) -> Wallet:
        """Credit the bonus balance. Bonus funds are not withdrawable."""
        value = parse_positive_amount(amount)
        wallet, transaction = await self._apply(
            self.db_manager.credit_wallet(
                user_id,
                value,
                TransactionType.BONUS,
                TransactionStatus.COMPLETED,
                to_bonus=True,
                description=description or f"Bonus of {value}",
            ),
            user_id,
            TransactionType.BONUS,
        )
        logger.info(
            "Bonus granted",
            user_id=user_id,
            amount=str(value),
            bonus_balance=str(wallet.bonus_balance),
            transaction_id=transaction.id,
        )
        return wallet

    async def get_user_transactions(self, user_id: int) -> List[Transaction]:
        """Get a user's ledger entries, newest first."""
        return await self.db_manager.get_user_transactions(user_id)

    async def _apply(self, operation, user_id: int, transaction_type: TransactionType):
        """Await a store balance change and record its outcome."""
        try:
            wallet, transaction = await operation
        except TourneyAPIError as e:
            logger.info(
                "Wallet operation rejected",
                user_id=user_id,
                transaction_type=transaction_type.value,
                reason=e.message,
            )
            if self.metrics:
                self.metrics.record_wallet_failure(transaction_type.value, type(e).__name__)
            raise

        if self.metrics:
            self.metrics.record_wallet_operation(transaction_type.value)
        return wallet, transaction
