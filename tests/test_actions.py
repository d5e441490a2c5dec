"""
Test suite for actions module

Tests the token to action mapping and amount validation.
"""

import pytest

from atm.actions import Action, ActionType, parse_action, validate_amount
from atm.exceptions import InvalidActionError, InvalidAmountError


def no_amount():
    raise AssertionError("amount should not be requested")


class TestParseAction:
    """Test parse_action"""
    
    @pytest.mark.parametrize("token,expected", [
        ("B", Action.balance()),
        ("=", Action.next()),
        ("X", Action.finished()),
    ])
    def test_actions_without_amount(self, token, expected):
        assert parse_action(token, no_amount) == expected
    
    def test_withdraw_and_deposit_acquire_amount(self):
        """Test that amount-bearing actions ask for their amount"""
        assert parse_action("-", lambda: 40) == Action.withdraw(40)
        assert parse_action("+", lambda: 30) == Action.deposit(30)
    
    def test_surrounding_whitespace_ignored(self):
        assert parse_action(" B \n", no_amount) == Action.balance()
    
    @pytest.mark.parametrize("token", ["", "b", "x", "Balance", "*", "--"])
    def test_unknown_token_is_invalid_action(self, token):
        """Test that anything outside the fixed set fails instead of defaulting"""
        with pytest.raises(InvalidActionError) as exc_info:
            parse_action(token, no_amount)
        assert exc_info.value.token == token
    
    def test_non_positive_amount_rejected(self):
        with pytest.raises(InvalidAmountError):
            parse_action("-", lambda: 0)
        with pytest.raises(InvalidAmountError):
            parse_action("+", lambda: -5)


class TestAction:
    """Test Action construction"""
    
    def test_ends_session(self):
        assert Action.next().ends_session
        assert Action.finished().ends_session
        assert not Action.balance().ends_session
        assert not Action.withdraw(1).ends_session
    
    def test_amount_only_for_withdraw_and_deposit(self):
        with pytest.raises(InvalidAmountError):
            Action(ActionType.BALANCE, 10)
        with pytest.raises(InvalidAmountError):
            Action(ActionType.WITHDRAW)
    
    def test_str(self):
        assert str(Action.withdraw(40)) == "Withdraw(40)"
        assert str(Action.finished()) == "Finished"


def test_validate_amount():
    assert validate_amount(25) == 25
    for bad in (0, -1, 2.5, True, "10", None):
        with pytest.raises(InvalidAmountError):
            validate_amount(bad)
