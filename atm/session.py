"""
Session Driver Module

Sequences customers at the terminal: acquire an id, greet the customer,
then perform actions until Next (move on to the next customer) or
Finished (shut the ATM down). Failures are presented to the customer and
the session carries on.
"""

import uuid
from dataclasses import dataclass
from typing import Optional

from .accounts import AccountLedger
from .actions import ActionType
from .audit import AuditTrail, AuditEventType
from .components import TerminalIO
from .config import AtmConfig
from .exceptions import AtmError
from .logging_config import get_logger, log_action
from .storage import InMemoryStorage
from .teller import Teller, TellerResult


@dataclass
class SessionSummary:
    """Counters for one run of the driver"""
    customers_served: int = 0
    actions_performed: int = 0
    errors: int = 0


class SessionDriver:
    """
    Control loop of a single ATM terminal
    """
    
    def __init__(
        self,
        ledger: AccountLedger,
        io: TerminalIO,
        teller: Optional[Teller] = None,
        audit_trail: Optional[AuditTrail] = None
    ):
        self.ledger = ledger
        self.io = io
        self.teller = teller if teller is not None else Teller(ledger, audit_trail=audit_trail)
        self.audit_trail = audit_trail
        self.logger = get_logger("atm.session")
        self.summary = SessionSummary()
    
    def run(self) -> SessionSummary:
        """Serve customers until Finished or end of input"""
        self.summary = SessionSummary()
        self._audit(AuditEventType.SYSTEM_START, "system", "atm")
        self.logger.info("ATM started")
        
        finished = False
        while not finished:
            try:
                account_id = self.io.acquire_id()
                name = self.ledger.get_name(account_id)
            except EOFError:
                break
            except AtmError as e:
                self._report(e)
                continue
            
            finished = self._serve_customer(account_id, name)
        
        self.io.present_message("ATM shutting down. Goodbye.")
        self._audit(AuditEventType.SYSTEM_STOP, "system", "atm", metadata={
            "customers_served": self.summary.customers_served,
            "actions_performed": self.summary.actions_performed
        })
        self.logger.info("ATM stopped")
        return self.summary
    
    def _serve_customer(self, account_id: int, name: str) -> bool:
        """
        Run one customer's session
        
        Returns:
            True when the customer asked to shut the ATM down
        """
        session_id = str(uuid.uuid4())
        self.io.present_message(f"Hello, {name}")
        self._audit(AuditEventType.SESSION_STARTED, "session", session_id,
                    metadata={"account_id": account_id}, session_id=session_id)
        log_action(self.logger, "info", f"Session started for account {account_id}",
                   account_id=account_id, action="session_start", session_id=session_id)
        
        shutdown = False
        while True:
            try:
                action = self.io.acquire_act()
            except EOFError:
                shutdown = True
                break
            except AtmError as e:
                self._report(e, account_id, session_id)
                continue
            
            if action.type == ActionType.NEXT:
                break
            if action.type == ActionType.FINISHED:
                shutdown = True
                break
            
            try:
                result = self.teller.perform(account_id, action, session_id=session_id)
            except AtmError as e:
                self._report(e, account_id, session_id)
                continue
            self._present_result(result)
            self.summary.actions_performed += 1
        
        self.summary.customers_served += 1
        self.io.present_message(f"So long, {name}")
        self._audit(AuditEventType.SESSION_ENDED, "session", session_id,
                    metadata={"account_id": account_id, "shutdown": shutdown},
                    session_id=session_id)
        return shutdown
    
    def _present_result(self, result: TellerResult) -> None:
        if result.action == ActionType.BALANCE:
            self.io.present_message(f"Current balance: {result.balance}")
        elif result.action == ActionType.WITHDRAW:
            self.io.present_message(f"Withdrew {result.amount}. New balance: {result.balance}")
            self.io.deliver_cash(result.dispensed)
        elif result.action == ActionType.DEPOSIT:
            self.io.present_message(f"Deposited {result.amount}. New balance: {result.balance}")
    
    def _report(self, error: AtmError, account_id: Optional[int] = None,
                session_id: Optional[str] = None) -> None:
        self.summary.errors += 1
        log_action(self.logger, "warning", str(error), account_id=account_id,
                   action=type(error).__name__, session_id=session_id)
        self.io.present_message(f"Error: {error}")
    
    def _audit(self, event_type: AuditEventType, entity_type: str, entity_id: str,
               metadata: Optional[dict] = None, session_id: Optional[str] = None) -> None:
        if self.audit_trail:
            self.audit_trail.log_event(event_type, entity_type, entity_id,
                                       metadata=metadata, session_id=session_id)


def build_atm(config: AtmConfig, io: Optional[TerminalIO] = None) -> SessionDriver:
    """
    Wire a ledger, teller and terminal together from configuration
    and seed the ledger
    """
    storage = InMemoryStorage()
    audit_trail = AuditTrail(storage) if config.enable_audit_logging else None
    
    ledger = AccountLedger(storage, audit_trail=audit_trail)
    ledger.initialize(config.seed_accounts)
    
    teller = Teller(ledger, allow_overdraft=config.allow_overdraft, audit_trail=audit_trail)
    if io is None:
        io = TerminalIO(denomination=config.cash_denomination)
    return SessionDriver(ledger, io, teller=teller, audit_trail=audit_trail)
