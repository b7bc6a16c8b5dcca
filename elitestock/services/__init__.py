"""
Services layer - Application business logic
"""

from elitestock.services.exceptions import (
    CoreError,
    ValidationError,
    InsufficientFunds,
    NotFound,
    InvalidState,
)
from elitestock.services.ledger import BalanceDirection, adjust_balance, get_balance
from elitestock.services.trade_engine import (
    TradeExecutionResult,
    create_trade,
    execute_trade,
    execute_with_copies,
    dispatch_pending_copy_trades,
    expire_stale_trades,
    fail_trade,
)
from elitestock.services.copy_trading import follow_trader, set_copy_status
from elitestock.services.investment_service import open_investment, create_plan, update_plan
from elitestock.services.settlement_service import SweepResult, run_settlement_sweep
from elitestock.services.transaction_review import (
    ReviewAction,
    create_transaction_request,
    review_transaction,
    list_transactions,
)

__all__ = [
    # Errors
    "CoreError",
    "ValidationError",
    "InsufficientFunds",
    "NotFound",
    "InvalidState",
    # Ledger
    "BalanceDirection",
    "adjust_balance",
    "get_balance",
    # Trade engine
    "TradeExecutionResult",
    "create_trade",
    "execute_trade",
    "execute_with_copies",
    "dispatch_pending_copy_trades",
    "expire_stale_trades",
    "fail_trade",
    # Copy trading
    "follow_trader",
    "set_copy_status",
    # Investments
    "open_investment",
    "create_plan",
    "update_plan",
    # Settlement
    "SweepResult",
    "run_settlement_sweep",
    # Transaction review
    "ReviewAction",
    "create_transaction_request",
    "review_transaction",
    "list_transactions",
]
