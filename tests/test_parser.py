"""Tests for the voice command parser."""

from decimal import Decimal

import pytest

from voicebudget.models.command import (
    AddExpense,
    AddIncome,
    ShowBudgetSummary,
    Unrecognized,
)
from voicebudget.parser import normalize_transcript, parse_amount, parse_command


class TestIncomeCommands:
    """Tests for "add <amount> from <source> to [my] income"."""

    def test_add_income_with_my(self):
        """The canonical income sentence."""
        command = parse_command("Add $2000 from salary to my income")
        assert isinstance(command, AddIncome)
        assert command.amount == Decimal("2000.00")
        assert command.source_name == "salary"

    def test_add_income_without_my(self):
        command = parse_command("add 100 from freelance to income")
        assert isinstance(command, AddIncome)
        assert command.amount == Decimal("100")
        assert command.source_name == "freelance"

    def test_multi_word_source(self):
        command = parse_command("Add $350.75 from side gig work to my income")
        assert isinstance(command, AddIncome)
        assert command.amount == Decimal("350.75")
        assert command.source_name == "side gig work"

    def test_keeps_original_text(self):
        text = "  Add $2000 from Salary to my income  "
        command = parse_command(text)
        assert command.text == text
        # Names come from the normalized transcript
        assert command.source_name == "salary"

    def test_thousands_separator(self):
        command = parse_command("Add $1,500.50 from bonus to my income")
        assert isinstance(command, AddIncome)
        assert command.amount == Decimal("1500.50")

    def test_other_currency_symbol(self):
        command = parse_command("Add ₹5000 from rent to my income")
        assert isinstance(command, AddIncome)
        assert command.amount == Decimal("5000")
        assert command.source_name == "rent"

    def test_trailing_punctuation_after_income(self):
        command = parse_command("Add $100 from freelance to my income.")
        assert isinstance(command, AddIncome)
        assert command.source_name == "freelance"

    @pytest.mark.parametrize(
        "text",
        [
            "Add $0 from bonus to my income",
            "Add $-5 from bonus to my income",
            "Add $10.999 from bonus to my income",
        ],
    )
    def test_unusable_amount_is_unrecognized(self, text):
        """Zero, negative and sub-cent amounts are rejected outright."""
        command = parse_command(text)
        assert isinstance(command, Unrecognized)
        assert command.text == text

    def test_add_without_from_is_unrecognized(self):
        """'Add $50 for groceries' is neither an income nor an expense."""
        assert isinstance(parse_command("Add $50 for groceries"), Unrecognized)


class TestExpenseCommands:
    """Tests for "(deduct|spend|spent) <amount> (for|on) <category>"."""

    @pytest.mark.parametrize(
        "text",
        [
            "Spend $25 on transportation",
            "Deduct $25 for transportation",
            "I spent $25 on transportation",
            "SPEND 25 ON TRANSPORTATION",
        ],
    )
    def test_expense_verbs(self, text):
        command = parse_command(text)
        assert isinstance(command, AddExpense)
        assert command.amount == Decimal("25.00")
        assert command.category_name == "transportation"

    def test_category_is_remaining_text(self):
        command = parse_command("Spend $12.50 on lunch with the team")
        assert isinstance(command, AddExpense)
        assert command.category_name == "lunch with the team"

    def test_trailing_punctuation_dropped(self):
        command = parse_command("Deduct $15 for coffee.")
        assert isinstance(command, AddExpense)
        assert command.category_name == "coffee"

    def test_empty_category_is_unrecognized(self):
        assert isinstance(parse_command("Spend $25 on ?"), Unrecognized)

    def test_missing_category_is_unrecognized(self):
        assert isinstance(parse_command("Spend $25 on"), Unrecognized)

    def test_spending_is_not_a_verb_match(self):
        assert isinstance(parse_command("Spending $25 on food"), Unrecognized)

    def test_amount_too_large_for_cents_is_unrecognized(self):
        command = parse_command("spend 99999999999999999999999999999 on yachts")

        assert isinstance(command, Unrecognized)


class TestBudgetCommands:
    """Tests for the budget summary query."""

    @pytest.mark.parametrize(
        "text",
        [
            "Show my budget",
            "please show me my budget now",
            "Budget, show it",
            "SHOW BUDGET",
        ],
    )
    def test_show_and_budget(self, text):
        command = parse_command(text)
        assert isinstance(command, ShowBudgetSummary)
        assert command.text == text

    def test_words_must_be_whole(self):
        """'showing' and 'budgets' are not the words show and budget."""
        assert isinstance(parse_command("showing budgets"), Unrecognized)

    def test_budget_alone_is_unrecognized(self):
        assert isinstance(parse_command("what is my budget"), Unrecognized)


class TestUnrecognized:
    """Tests for input that matches nothing."""

    @pytest.mark.parametrize("text", ["", "   ", "hello there", "add money"])
    def test_unrecognized(self, text):
        command = parse_command(text)
        assert isinstance(command, Unrecognized)
        assert command.text == text

    def test_none_is_unrecognized(self):
        command = parse_command(None)
        assert isinstance(command, Unrecognized)
        assert command.text == ""


class TestDeterminism:
    """The parser is pure."""

    @pytest.mark.parametrize(
        "text",
        [
            "Add $2000 from salary to my income",
            "Spend $25 on transportation",
            "Show my budget",
            "nonsense",
        ],
    )
    def test_same_input_same_command(self, text):
        assert parse_command(text) == parse_command(text)


class TestHelpers:
    """Tests for amount parsing and normalization."""

    def test_normalize(self):
        assert normalize_transcript("  Show My BUDGET ") == "show my budget"
        assert normalize_transcript(None) == ""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("25", Decimal("25")),
            ("25.5", Decimal("25.5")),
            ("1,000.25", Decimal("1000.25")),
        ],
    )
    def test_valid_amounts(self, raw, expected):
        assert parse_amount(raw) == expected

    @pytest.mark.parametrize("raw", ["0", "-1", "0.00", "1.234", "abc", "NaN", "Infinity", "",
                                     "99999999999999999999999999999"])
    def test_invalid_amounts(self, raw):
        assert parse_amount(raw) is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
