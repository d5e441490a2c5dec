"""
Error types raised by the ledger, the teller and the terminal components.

Every failure a customer can trigger derives from AtmError so the session
driver can present it as a message instead of terminating the process.
"""


class AtmError(Exception):
    """Base class for all ATM failures"""


class AccountNotFoundError(AtmError, KeyError):
    """No account in the ledger has the requested id"""

    def __init__(self, account_id):
        self.account_id = account_id
        super().__init__(f"Account {account_id} not found")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class DuplicateAccountError(AtmError, ValueError):
    """A seed list contains the same id more than once"""

    def __init__(self, account_id):
        self.account_id = account_id
        super().__init__(f"Duplicate account id {account_id} in seed list")


class InvalidActionError(AtmError, ValueError):
    """A raw action token is not one of the recognised actions"""

    def __init__(self, token: str):
        self.token = token
        super().__init__(f"Invalid action: {token!r}")


class InvalidAmountError(AtmError, ValueError):
    """Withdraw and deposit amounts must be positive integers"""


class InsufficientFundsError(AtmError, ValueError):
    """A withdrawal would take the balance below zero"""

    def __init__(self, account_id: int, balance: int, amount: int):
        self.account_id = account_id
        self.balance = balance
        self.amount = amount
        super().__init__(
            f"Insufficient funds: balance {balance}, requested {amount}"
        )


class InvalidInputError(AtmError, ValueError):
    """Terminal input could not be read as the expected value"""
