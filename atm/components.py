"""
Terminal Components Module

The customer-facing behaviors of the ATM: prompting for and acquiring an
account id, an amount or an action, presenting messages and dispensing
(printing) cash. Streams are injectable so sessions can be scripted.
"""

import sys
from typing import Optional, TextIO

from .actions import Action, parse_action
from .exceptions import InvalidInputError


ID_PROMPT = "Enter customer id: "
AMOUNT_PROMPT = "Enter amount: "
ACTION_PROMPT = "Enter action: (B) Balance (-) Withdraw (+) Deposit (=) Done (X) Exit: "


class TerminalIO:
    """Reads customer input from stdin and writes prompts and messages to stdout"""
    
    def __init__(self, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None,
                 denomination: int = 20):
        if denomination <= 0:
            raise ValueError("Cash denomination must be positive")
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.denomination = denomination
    
    def _prompt(self, prompt: str) -> str:
        self.stdout.write(prompt)
        self.stdout.flush()
        line = self.stdin.readline()
        if not line:
            raise EOFError("No more input")
        return line.rstrip("\r\n")
    
    def _read_int(self, prompt: str, what: str) -> int:
        text = self._prompt(prompt).strip()
        try:
            return int(text)
        except ValueError:
            raise InvalidInputError(f"Invalid {what}: {text!r}") from None
    
    def acquire_id(self) -> int:
        """Prompt for and read a customer id"""
        return self._read_int(ID_PROMPT, "customer id")
    
    def acquire_amount(self) -> int:
        """Prompt for and read an amount"""
        return self._read_int(AMOUNT_PROMPT, "amount")
    
    def acquire_act(self) -> Action:
        """
        Prompt for an action token and return the matching Action
        
        Withdraw and deposit go on to prompt for their amount.
        """
        return parse_action(self._prompt(ACTION_PROMPT), self.acquire_amount)
    
    def present_message(self, message: str) -> None:
        """Show a message followed by a newline"""
        self.stdout.write(message + "\n")
        self.stdout.flush()
    
    def deliver_cash(self, amount: int) -> str:
        """
        Dispense cash, i.e. print one bill per whole denomination
        and the remainder, and return the printed line
        """
        bills, rest = divmod(amount, self.denomination)
        line = "Here's your cash: " + " ".join(
            [f"[{self.denomination} @ {self.denomination}]"] * bills
        )
        if rest:
            line += f" and {rest} more" if bills else f"{rest}"
        self.present_message(line)
        return line
