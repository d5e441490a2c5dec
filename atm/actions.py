"""
Customer Actions Module

The five actions a customer can select at the terminal and the mapping
from raw command tokens to actions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .exceptions import InvalidActionError, InvalidAmountError


class ActionType(Enum):
    """Customer-selectable actions, valued by their terminal token"""
    BALANCE = "B"    # Balance inquiry
    WITHDRAW = "-"   # Withdraw an amount
    DEPOSIT = "+"    # Deposit an amount
    NEXT = "="       # Finish this customer and move to the next one
    FINISHED = "X"   # Shut down the ATM


AMOUNT_ACTIONS = frozenset({ActionType.WITHDRAW, ActionType.DEPOSIT})


@dataclass(frozen=True)
class Action:
    """An action and, for withdraw and deposit, its positive amount"""
    type: ActionType
    amount: Optional[int] = None
    
    def __post_init__(self):
        if self.type in AMOUNT_ACTIONS:
            validate_amount(self.amount)
        elif self.amount is not None:
            raise InvalidAmountError(f"{self.type.name.title()} takes no amount")
    
    @classmethod
    def balance(cls) -> 'Action':
        return cls(ActionType.BALANCE)
    
    @classmethod
    def withdraw(cls, amount: int) -> 'Action':
        return cls(ActionType.WITHDRAW, amount)
    
    @classmethod
    def deposit(cls, amount: int) -> 'Action':
        return cls(ActionType.DEPOSIT, amount)
    
    @classmethod
    def next(cls) -> 'Action':
        return cls(ActionType.NEXT)
    
    @classmethod
    def finished(cls) -> 'Action':
        return cls(ActionType.FINISHED)
    
    @property
    def ends_session(self) -> bool:
        """True for Next and Finished"""
        return self.type in (ActionType.NEXT, ActionType.FINISHED)
    
    def __str__(self) -> str:
        if self.amount is None:
            return self.type.name.title()
        return f"{self.type.name.title()}({self.amount})"


def validate_amount(amount) -> int:
    """Check that a withdraw or deposit amount is a positive integer"""
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise InvalidAmountError(f"Amount must be an integer, got {amount!r}")
    if amount <= 0:
        raise InvalidAmountError(f"Amount must be positive, got {amount}")
    return amount


def parse_action(token: str, acquire_amount: Callable[[], int]) -> Action:
    """
    Translate a raw command token into an Action
    
    The amount for withdraw and deposit is requested from acquire_amount
    only after the token has been recognised.
    
    Raises:
        InvalidActionError: token is not one of B, -, +, =, X
        InvalidAmountError: acquired amount is not a positive integer
    """
    try:
        action_type = ActionType(token.strip())
    except ValueError:
        raise InvalidActionError(token) from None
    
    if action_type in AMOUNT_ACTIONS:
        return Action(action_type, acquire_amount())
    return Action(action_type)
