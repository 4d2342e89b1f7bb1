"""
Fund Service - applies the balance debit of a finally approved money request.
"""
import logging
from decimal import Decimal
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from money_requests.config import settings
from money_requests.exceptions import FundDebitFailed
from money_requests.models.fund_type import FundType

logger = logging.getLogger(__name__)


class FundService:

    def debit_fund(self, fund_type_id: int, amount: Decimal, db: Session) -> None:
        """
        Debit amount from the fund's current balance.

        Runs inside the caller's transaction and never commits. The balance is
        computed by the database so concurrent debits on one fund cannot lose
        updates. Overdraft is allowed unless settings.allow_fund_overdraft is off.

        Raises:
            FundDebitFailed: fund missing, insufficient balance (overdraft off),
                or the update itself failed
        """
        query = db.query(FundType).filter(FundType.id == fund_type_id)
        if not settings.allow_fund_overdraft:
            query = query.filter(FundType.current_balance >= amount)

        try:
            updated = query.update(
                {FundType.current_balance: FundType.current_balance - amount},
                synchronize_session=False
            )
        except SQLAlchemyError as e:
            logger.error(f"Debit of {amount} from fund {fund_type_id} failed: {str(e)}", exc_info=True)
            raise FundDebitFailed(f"Could not debit fund {fund_type_id}: {str(e)}") from e

        if updated == 0:
            exists = db.query(FundType.id).filter(FundType.id == fund_type_id).first()
            if not exists:
                raise FundDebitFailed(f"Fund type {fund_type_id} not found")
            raise FundDebitFailed(f"Fund type {fund_type_id} has insufficient balance for {amount}")

        logger.info(f"Debited {amount} from fund {fund_type_id}")


# Singleton instance
fund_service = FundService()
