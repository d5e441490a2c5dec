"""
Test suite for teller module

Tests withdrawals, deposits, balance inquiries and the overdraft policy.
"""

import pytest

from atm.storage import InMemoryStorage
from atm.audit import AuditTrail, AuditEventType
from atm.accounts import AccountLedger
from atm.actions import Action, ActionType
from atm.teller import Teller, TellerResult
from atm.exceptions import (
    AccountNotFoundError, InsufficientFundsError, InvalidActionError, InvalidAmountError
)


class TestTeller:
    """Test Teller against a seeded ledger"""
    
    def setup_method(self):
        self.storage = InMemoryStorage()
        self.audit_trail = AuditTrail(self.storage)
        self.ledger = AccountLedger(self.storage, audit_trail=self.audit_trail)
        self.ledger.initialize([("Alice", 1, 130), ("Bob", 2, 50)])
        self.teller = Teller(self.ledger, audit_trail=self.audit_trail)
    
    def test_balance(self):
        result = self.teller.balance(1)
        
        assert result == TellerResult(account_id=1, action=ActionType.BALANCE, balance=130)
    
    def test_withdraw(self):
        """Test that Withdraw(40) from 130 leaves 90 and dispenses 40"""
        result = self.teller.withdraw(1, 40)
        
        assert result.balance == 90
        assert result.dispensed == 40
        assert self.ledger.get_balance(1) == 90
        assert self.ledger.get_balance(2) == 50
    
    def test_deposit(self):
        result = self.teller.deposit(2, 25)
        
        assert result.balance == 75
        assert result.dispensed == 0
        assert self.ledger.get_balance(2) == 75
    
    def test_withdraw_whole_balance(self):
        assert self.teller.withdraw(2, 50).balance == 0
    
    def test_overdraft_refused(self):
        """Test that a refused withdrawal changes nothing"""
        with pytest.raises(InsufficientFundsError) as exc_info:
            self.teller.withdraw(2, 51)
        
        assert exc_info.value.balance == 50
        assert exc_info.value.amount == 51
        assert self.ledger.get_balance(2) == 50
        assert self.audit_trail.get_events_for_entity("account", 2) == []
    
    def test_overdraft_allowed(self):
        teller = Teller(self.ledger, allow_overdraft=True)
        
        assert teller.withdraw(2, 80).balance == -30
        assert self.ledger.get_balance(2) == -30
    
    def test_unknown_account(self):
        for operation in (self.teller.balance,
                          lambda i: self.teller.withdraw(i, 10),
                          lambda i: self.teller.deposit(i, 10)):
            with pytest.raises(AccountNotFoundError):
                operation(3)
        assert 3 not in self.ledger
    
    def test_invalid_amounts(self):
        with pytest.raises(InvalidAmountError):
            self.teller.withdraw(1, 0)
        with pytest.raises(InvalidAmountError):
            self.teller.deposit(1, -10)
        assert self.ledger.get_balance(1) == 130
    
    def test_perform_dispatch(self):
        assert self.teller.perform(1, Action.balance()).balance == 130
        assert self.teller.perform(1, Action.withdraw(30)).balance == 100
        assert self.teller.perform(1, Action.deposit(5)).balance == 105
    
    def test_perform_rejects_session_actions(self):
        with pytest.raises(InvalidActionError):
            self.teller.perform(1, Action.next())
    
    def test_audit_events(self):
        """Test that withdrawals and deposits are recorded with the session"""
        self.teller.withdraw(1, 40, session_id="s1")
        self.teller.deposit(1, 10, session_id="s1")
        
        withdrawals = self.audit_trail.get_events_by_type(AuditEventType.WITHDRAWAL)
        deposits = self.audit_trail.get_events_by_type(AuditEventType.DEPOSIT)
        
        assert withdrawals[0].metadata == {"amount": 40, "old_balance": 130, "new_balance": 90}
        assert withdrawals[0].session_id == "s1"
        assert deposits[0].metadata["new_balance"] == 100
