"""
Account Ledger Module

The authoritative in-memory store of customer accounts. Accounts are
seeded in bulk by initialize() and afterwards only ever change through a
whole-value replace of their balance (update_balance). Every query
returns values, never references into storage.
"""

import threading
from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, StrictInt, StrictStr

from .audit import AuditTrail, AuditEventType
from .exceptions import AccountNotFoundError, DuplicateAccountError
from .logging_config import get_logger, log_action
from .storage import StorageInterface, InMemoryStorage


class AccountSpec(BaseModel):
    """Seed record for one account: name, externally assigned id and opening balance"""
    model_config = ConfigDict(frozen=True)
    
    name: StrictStr
    id: StrictInt
    balance: StrictInt


SpecLike = Union[AccountSpec, Dict[str, Any], Tuple[str, int, int]]


@dataclass(frozen=True)
class Account:
    """
    Customer account snapshot
    
    Frozen: a balance change produces a new Account value that replaces the
    old one in the ledger.
    """
    id: int
    name: str
    balance: int
    
    def with_balance(self, balance: int) -> 'Account':
        """Copy of this account carrying a different balance"""
        return Account(id=self.id, name=self.name, balance=balance)
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage"""
        return asdict(self)
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Account':
        """Create instance from dictionary"""
        return cls(id=data['id'], name=data['name'], balance=data['balance'])
    
    @classmethod
    def from_spec(cls, spec: AccountSpec) -> 'Account':
        return cls(id=spec.id, name=spec.name, balance=spec.balance)


def to_account_spec(spec: SpecLike) -> AccountSpec:
    """Accept an AccountSpec, a mapping or a (name, id, balance) triple"""
    if isinstance(spec, AccountSpec):
        return spec
    if isinstance(spec, dict):
        return AccountSpec(**spec)
    name, account_id, balance = spec
    return AccountSpec(name=name, id=account_id, balance=balance)


def _is_integer(value: Any) -> bool:
    # bool is an int subclass and True == 1 would hit account 1
    return isinstance(value, int) and not isinstance(value, bool)


class AccountLedger:
    """
    Authoritative store of Accounts keyed by id
    
    Lookups are exact-match on the integer id. Any id that matches no
    account raises AccountNotFoundError and leaves the store unchanged.
    """
    
    def __init__(
        self,
        storage: Optional[StorageInterface] = None,
        audit_trail: Optional[AuditTrail] = None,
        table_name: str = "accounts"
    ):
        self.storage = storage if storage is not None else InMemoryStorage()
        self.audit_trail = audit_trail
        self.accounts_table = table_name
        self.logger = get_logger("atm.accounts")
        self._lock = threading.RLock()
    
    def initialize(self, specs: Iterable[SpecLike]) -> None:
        """
        Seed the ledger with one Account per spec
        
        An empty sequence is a no-op and keeps the current contents. A
        non-empty sequence replaces the ledger contents as a whole; it is
        validated first, so a bad spec or a duplicate id raises before
        anything changes.
        
        Args:
            specs: AccountSpec objects, mappings or (name, id, balance) triples
            
        Raises:
            DuplicateAccountError: the same id appears twice
            pydantic.ValidationError: a spec has a missing or mistyped field
        """
        specs = [to_account_spec(spec) for spec in specs]
        if not specs:
            self.logger.debug("initialize called with no accounts; ledger unchanged")
            return
        
        records = {}
        for spec in specs:
            if spec.id in records:
                raise DuplicateAccountError(spec.id)
            records[spec.id] = Account.from_spec(spec).to_dict()
        
        with self._lock:
            self.storage.replace_table(self.accounts_table, records)
        
        log_action(
            self.logger, "info", f"Ledger initialized with {len(records)} accounts",
            action="initialize", extra={"account_ids": list(records)}
        )
        if self.audit_trail:
            self.audit_trail.log_event(
                event_type=AuditEventType.LEDGER_INITIALIZED,
                entity_type="ledger",
                entity_id=self.accounts_table,
                metadata={"account_count": len(records), "account_ids": list(records)}
            )
    
    def get_account(self, account_id: int) -> Account:
        """Get an account snapshot by id"""
        if not _is_integer(account_id):
            raise AccountNotFoundError(account_id)
        data = self.storage.load(self.accounts_table, account_id)
        if data is None:
            raise AccountNotFoundError(account_id)
        return Account.from_dict(data)
    
    def get_balance(self, account_id: int) -> int:
        """Return the balance of the account with the given id"""
        return self.get_account(account_id).balance
    
    def get_name(self, account_id: int) -> str:
        """Return the customer name of the account with the given id"""
        return self.get_account(account_id).name
    
    def update_balance(self, account_id: int, new_balance: int) -> Account:
        """
        Replace the balance of an existing account
        
        The stored account is replaced by a new value with the same id and
        name. An unknown id raises AccountNotFoundError and never inserts.
        
        Returns:
            The replacement Account
        """
        if not _is_integer(new_balance):
            raise TypeError(f"Balance must be an integer, got {new_balance!r}")
        
        with self._lock:
            account = self.get_account(account_id)
            updated = account.with_balance(new_balance)
            self.storage.save(self.accounts_table, account_id, updated.to_dict())
        
        log_action(
            self.logger, "info", f"Balance updated for account {account_id}",
            account_id=account_id, action="update_balance",
            extra={"old_balance": account.balance, "new_balance": new_balance}
        )
        if self.audit_trail:
            self.audit_trail.log_event(
                event_type=AuditEventType.BALANCE_UPDATED,
                entity_type="account",
                entity_id=account_id,
                metadata={"old_balance": account.balance, "new_balance": new_balance}
            )
        return updated
    
    def accounts(self) -> List[Account]:
        """All accounts in seed order"""
        return [Account.from_dict(data) for data in self.storage.load_all(self.accounts_table)]
    
    def __contains__(self, account_id: Any) -> bool:
        return _is_integer(account_id) and self.storage.exists(self.accounts_table, account_id)
    
    def __len__(self) -> int:
        return self.storage.count(self.accounts_table)
