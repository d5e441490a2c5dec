"""
Teller Service Module

Applies balance inquiries, withdrawals and deposits to the account ledger.
A withdrawal or deposit of amount a is update_balance(id, get_balance(id) ± a);
the overdraft check runs before the replace so a refused withdrawal
changes nothing.
"""

from dataclasses import dataclass
from typing import Optional

from .accounts import AccountLedger
from .actions import Action, ActionType, validate_amount
from .audit import AuditTrail, AuditEventType
from .exceptions import InsufficientFundsError, InvalidActionError
from .logging_config import get_logger, log_action


@dataclass(frozen=True)
class TellerResult:
    """Outcome of one action against an account"""
    account_id: int
    action: ActionType
    balance: int
    amount: int = 0
    dispensed: int = 0


class Teller:
    """
    Performs customer actions against a ledger
    """
    
    def __init__(
        self,
        ledger: AccountLedger,
        allow_overdraft: bool = False,
        audit_trail: Optional[AuditTrail] = None
    ):
        self.ledger = ledger
        self.allow_overdraft = allow_overdraft
        self.audit_trail = audit_trail
        self.logger = get_logger("atm.teller")
    
    def balance(self, account_id: int) -> TellerResult:
        """Balance inquiry"""
        return TellerResult(
            account_id=account_id,
            action=ActionType.BALANCE,
            balance=self.ledger.get_balance(account_id)
        )
    
    def withdraw(self, account_id: int, amount: int, session_id: Optional[str] = None) -> TellerResult:
        """
        Withdraw a positive amount
        
        Raises:
            InvalidAmountError: amount is not a positive integer
            AccountNotFoundError: unknown account
            InsufficientFundsError: overdraft disallowed and amount exceeds balance
        """
        validate_amount(amount)
        current = self.ledger.get_balance(account_id)
        new_balance = current - amount
        if new_balance < 0 and not self.allow_overdraft:
            log_action(
                self.logger, "warning", f"Withdrawal refused for account {account_id}",
                account_id=account_id, action="withdraw", session_id=session_id,
                extra={"balance": current, "amount": amount}
            )
            raise InsufficientFundsError(account_id, current, amount)
        
        self.ledger.update_balance(account_id, new_balance)
        self._record(AuditEventType.WITHDRAWAL, account_id, amount, current, new_balance, session_id)
        return TellerResult(
            account_id=account_id,
            action=ActionType.WITHDRAW,
            balance=new_balance,
            amount=amount,
            dispensed=amount
        )
    
    def deposit(self, account_id: int, amount: int, session_id: Optional[str] = None) -> TellerResult:
        """Deposit a positive amount"""
        validate_amount(amount)
        current = self.ledger.get_balance(account_id)
        new_balance = current + amount
        
        self.ledger.update_balance(account_id, new_balance)
        self._record(AuditEventType.DEPOSIT, account_id, amount, current, new_balance, session_id)
        return TellerResult(
            account_id=account_id,
            action=ActionType.DEPOSIT,
            balance=new_balance,
            amount=amount
        )
    
    def perform(self, account_id: int, action: Action, session_id: Optional[str] = None) -> TellerResult:
        """Dispatch a Balance, Withdraw or Deposit action"""
        if action.type == ActionType.BALANCE:
            return self.balance(account_id)
        if action.type == ActionType.WITHDRAW:
            return self.withdraw(account_id, action.amount, session_id=session_id)
        if action.type == ActionType.DEPOSIT:
            return self.deposit(account_id, action.amount, session_id=session_id)
        raise InvalidActionError(str(action))
    
    def _record(self, event_type: AuditEventType, account_id: int, amount: int,
                old_balance: int, new_balance: int, session_id: Optional[str]) -> None:
        log_action(
            self.logger, "info", f"{event_type.value.title()} of {amount} on account {account_id}",
            account_id=account_id, action=event_type.value, session_id=session_id,
            extra={"amount": amount, "new_balance": new_balance}
        )
        if self.audit_trail:
            self.audit_trail.log_event(
                event_type=event_type,
                entity_type="account",
                entity_id=account_id,
                metadata={
                    "amount": amount,
                    "old_balance": old_balance,
                    "new_balance": new_balance
                },
                session_id=session_id
            )
