"""
Test suite for the session driver

Runs scripted customer sessions end to end through TerminalIO.
"""

import io

from atm.storage import InMemoryStorage
from atm.audit import AuditTrail, AuditEventType
from atm.accounts import AccountLedger
from atm.components import TerminalIO
from atm.config import AtmConfig
from atm.session import SessionDriver, build_atm
from atm.teller import Teller


class TestSessionDriver:
    """Test the customer control loop"""
    
    def setup_method(self):
        self.storage = InMemoryStorage()
        self.audit_trail = AuditTrail(self.storage)
        self.ledger = AccountLedger(self.storage, audit_trail=self.audit_trail)
        self.ledger.initialize([("Alice", 1, 100), ("Bob", 2, 50)])
    
    def run_script(self, script: str, allow_overdraft: bool = False):
        self.stdout = io.StringIO()
        terminal = TerminalIO(io.StringIO(script), self.stdout)
        teller = Teller(self.ledger, allow_overdraft=allow_overdraft, audit_trail=self.audit_trail)
        driver = SessionDriver(self.ledger, terminal, teller=teller, audit_trail=self.audit_trail)
        return driver.run()
    
    def test_deposit_then_withdraw(self):
        """Test deposit 30 then withdraw 40 against Alice's account"""
        summary = self.run_script("1\n+\n30\n-\n40\nB\nX\n")
        output = self.stdout.getvalue()
        
        assert self.ledger.get_balance(1) == 90
        assert self.ledger.get_balance(2) == 50
        assert "Hello, Alice" in output
        assert "Deposited 30. New balance: 130" in output
        assert "Withdrew 40. New balance: 90" in output
        assert "Here's your cash: [20 @ 20] [20 @ 20]" in output
        assert "Current balance: 90" in output
        assert "ATM shutting down. Goodbye." in output
        assert summary.customers_served == 1
        assert summary.actions_performed == 3
        assert summary.errors == 0
    
    def test_next_customer(self):
        """Test that Next moves on to another customer"""
        summary = self.run_script("1\n=\n2\n+\n5\nX\n")
        output = self.stdout.getvalue()
        
        assert "So long, Alice" in output
        assert "Hello, Bob" in output
        assert self.ledger.get_balance(2) == 55
        assert summary.customers_served == 2
    
    def test_unknown_id_is_reported(self):
        """Test that an unknown id is a message, not a crash"""
        summary = self.run_script("3\n1\nB\nX\n")
        output = self.stdout.getvalue()
        
        assert "Error: Account 3 not found" in output
        assert "Hello, Alice" in output
        assert summary.errors == 1
        assert 3 not in self.ledger
    
    def test_invalid_inputs_keep_session_alive(self):
        summary = self.run_script("abc\n1\nQ\n-\n0\n-\nxyz\nB\nX\n")
        output = self.stdout.getvalue()
        
        assert "Error: Invalid customer id: 'abc'" in output
        assert "Error: Invalid action: 'Q'" in output
        assert "Error: Amount must be positive, got 0" in output
        assert "Error: Invalid amount: 'xyz'" in output
        assert "Current balance: 100" in output
        assert summary.errors == 4
        assert summary.actions_performed == 1
    
    def test_overdraft_refused(self):
        self.run_script("2\n-\n60\nX\n")
        output = self.stdout.getvalue()
        
        assert "Error: Insufficient funds: balance 50, requested 60" in output
        assert "Here's your cash" not in output
        assert self.ledger.get_balance(2) == 50
    
    def test_overdraft_allowed(self):
        self.run_script("2\n-\n60\nX\n", allow_overdraft=True)
        
        assert self.ledger.get_balance(2) == -10
    
    def test_end_of_input_shuts_down(self):
        """Test that running out of input ends the run cleanly"""
        summary = self.run_script("1\nB\n")
        
        assert summary.customers_served == 1
        assert self.stdout.getvalue().endswith("So long, Alice\nATM shutting down. Goodbye.\n")
    
    def test_session_audit_trail(self):
        self.run_script("1\n-\n10\n=\n2\nX\n")
        
        started = self.audit_trail.get_events_by_type(AuditEventType.SESSION_STARTED)
        ended = self.audit_trail.get_events_by_type(AuditEventType.SESSION_ENDED)
        withdrawal = self.audit_trail.get_events_by_type(AuditEventType.WITHDRAWAL)[0]
        
        assert [e.metadata["account_id"] for e in started] == [1, 2]
        assert [e.metadata["shutdown"] for e in ended] == [False, True]
        assert withdrawal.session_id == started[0].session_id
        assert len(self.audit_trail.get_events_by_type(AuditEventType.SYSTEM_STOP)) == 1
        assert self.audit_trail.verify_integrity()["valid"]


class TestBuildAtm:
    """Test wiring from configuration"""
    
    def test_build_seeds_ledger(self):
        config = AtmConfig(
            seed_accounts=[{"name": "Erin", "id": 9, "balance": 300}],
            cash_denomination=50,
            allow_overdraft=True
        )
        stdout = io.StringIO()
        terminal = TerminalIO(io.StringIO("9\n-\n320\nX\n"), stdout,
                              denomination=config.cash_denomination)
        
        driver = build_atm(config, io=terminal)
        driver.run()
        
        assert driver.ledger.get_balance(9) == -20
        assert "[50 @ 50] " * 5 + "[50 @ 50] and 20 more" in stdout.getvalue()
    
    def test_build_without_audit(self):
        config = AtmConfig(enable_audit_logging=False)
        
        driver = build_atm(config, io=TerminalIO(io.StringIO(""), io.StringIO()))
        
        assert driver.audit_trail is None
        assert driver.ledger.get_name(1) == "Alice"
