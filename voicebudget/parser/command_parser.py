"""
Voice Command Parser

Turns a free-form transcript into exactly one Command. Pure: no I/O,
no state, never raises. The same text always gives the same command.

Recognized shapes, checked in this order:

1. INCOME:  "add <amount> from <source> to [my] income"
2. EXPENSE: "(deduct|spend|spent) <amount> (for|on) <category>"
3. BUDGET:  any transcript containing the words "show" and "budget"

Anything else is Unrecognized. A transcript that has the income or
expense shape but an unusable amount (zero, negative, more than two
decimal places) or an empty name is also Unrecognized.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from voicebudget.models.command import (
    AddExpense,
    AddIncome,
    Command,
    ShowBudgetSummary,
    Unrecognized,
)


CURRENCY_SYMBOLS = "$€£¥₹"

MAX_DECIMAL_PLACES = 2

_CENT = Decimal("0.01")

# Digits with optional thousands separators ("2,000") and decimals.
# The sign is captured so negative amounts are rejected explicitly.
_AMOUNT = (
    rf"[{re.escape(CURRENCY_SYMBOLS)}]?\s*"
    r"(?P<amount>-?(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?)"
)

INCOME_PATTERN = re.compile(
    rf"\badd\s+{_AMOUNT}\s+from\s+(?P<name>.+?)\s+to\s+(?:my\s+)?income\b"
)

EXPENSE_PATTERN = re.compile(
    rf"\b(?:deduct|spend|spent)\s+{_AMOUNT}\s+(?:for|on)\s+(?P<name>.+)"
)

SHOW_PATTERN = re.compile(r"\bshow\b")
BUDGET_PATTERN = re.compile(r"\bbudget\b")

# Speech-to-text engines end sentences with punctuation
_TRAILING_PUNCTUATION = ".!?,;:"


def normalize_transcript(text: Optional[str]) -> str:
    """Trim and lowercase a transcript before matching."""
    if not text:
        return ""
    return text.strip().lower()


def parse_amount(raw: str) -> Optional[Decimal]:
    """
    Parse a spoken amount.

    Returns None unless the value is a finite positive number with at
    most two decimal places that can be stored in cents.
    """
    try:
        amount = Decimal(raw.replace(",", ""))
    except (InvalidOperation, AttributeError):
        return None

    if not amount.is_finite() or amount <= 0:
        return None

    exponent = amount.as_tuple().exponent
    if isinstance(exponent, int) and -exponent > MAX_DECIMAL_PLACES:
        return None

    try:
        amount.quantize(_CENT)
    except InvalidOperation:
        return None

    return amount


def clean_name(raw: str) -> str:
    """Trim an extracted source/category name."""
    return raw.strip().rstrip(_TRAILING_PUNCTUATION).strip()


def parse_command(text: Optional[str]) -> Command:
    """
    Classify a transcript into a Command.

    Args:
        text: Raw transcript (any case, may include currency symbols)

    Returns:
        AddIncome, AddExpense, ShowBudgetSummary or Unrecognized.
        The command keeps the original text.
    """
    original = text or ""
    normalized = normalize_transcript(original)

    income = INCOME_PATTERN.search(normalized)
    if income:
        amount = parse_amount(income.group("amount"))
        name = clean_name(income.group("name"))
        if amount is None or not name:
            return Unrecognized(text=original)
        return AddIncome(amount=amount, source_name=name, text=original)

    expense = EXPENSE_PATTERN.search(normalized)
    if expense:
        amount = parse_amount(expense.group("amount"))
        name = clean_name(expense.group("name"))
        if amount is None or not name:
            return Unrecognized(text=original)
        return AddExpense(amount=amount, category_name=name, text=original)

    if SHOW_PATTERN.search(normalized) and BUDGET_PATTERN.search(normalized):
        return ShowBudgetSummary(text=original)

    return Unrecognized(text=original)
