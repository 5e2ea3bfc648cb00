import math
import re
from dataclasses import dataclass
from decimal import Context, Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Optional, Tuple

NUMBER_RE = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$', re.ASCII)
VALID_TERM_COUNTS = (2, 3, 4)
FOUR_PLACES = Decimal('0.0001')
# wide enough for any float quantized to 4 places
WIDE_CONTEXT = Context(prec=400)


class State(Enum):
    START = 'start'
    TO_BEFORE_BASE = 'to_before_base'
    HAVE_BASE = 'have_base'
    AWAITING_TARGETS = 'awaiting_targets'


class Token(Enum):
    NUMBER = 'number'
    TO = 'to'
    CODE = 'code'


@dataclass(frozen=True)
class ParsedQuery:
    amount: Optional[str] = None
    base_currency: Optional[str] = None
    target_currencies: Tuple[str, ...] = ()
    is_valid: bool = False


@dataclass(frozen=True)
class ConversionRecord:
    base_currency: str
    target_currency: str
    amount: str
    converted_amount: float
    inverse_rate: float
    title: str
    subtitle: str
    copy_text: str


@dataclass(frozen=True)
class ErrorNotice:
    title: str


def is_currency_code(code):
    return len(code) == 3


def is_numeric(term):
    if not NUMBER_RE.match(term):
        return False
    return math.isfinite(float(term))


def classify(term):
    if is_numeric(term):
        return Token.NUMBER
    if term.lower() == 'to':
        return Token.TO
    return Token.CODE


class _QueryWalker:
    """Walks the query terms through the parser state machine.

    A transition returns the next state, or None when the query is
    structurally broken; the walk stops at the first None.
    """

    def __init__(self):
        self.state = State.START
        self.amount = None
        self.base = None
        self.targets = []
        self.completed = False

    def take_amount(self, term):
        if self.amount is not None:
            return None
        self.amount = term
        return self.state

    def take_to(self, term):
        self.completed = False
        if self.state in (State.START, State.TO_BEFORE_BASE):
            return State.TO_BEFORE_BASE
        return State.AWAITING_TARGETS

    def take_base(self, term):
        code = term.upper()
        if not is_currency_code(code):
            return None
        self.base = code
        self.completed = True
        # a "to" seen before the base still opens the target slot
        if self.state == State.TO_BEFORE_BASE:
            return State.AWAITING_TARGETS
        return State.HAVE_BASE

    def take_targets(self, term):
        added = 0
        for part in term.upper().split(','):
            code = part.strip()
            if is_currency_code(code) and code not in self.targets:
                self.targets.append(code)
                added += 1
        self.completed = added > 0
        return State.HAVE_BASE

    TRANSITIONS = {
        (State.START, Token.NUMBER): take_amount,
        (State.START, Token.TO): take_to,
        (State.START, Token.CODE): take_base,
        (State.TO_BEFORE_BASE, Token.NUMBER): take_amount,
        (State.TO_BEFORE_BASE, Token.TO): take_to,
        (State.TO_BEFORE_BASE, Token.CODE): take_base,
        (State.HAVE_BASE, Token.NUMBER): take_amount,
        (State.HAVE_BASE, Token.TO): take_to,
        (State.AWAITING_TARGETS, Token.NUMBER): take_amount,
        (State.AWAITING_TARGETS, Token.TO): take_to,
        (State.AWAITING_TARGETS, Token.CODE): take_targets,
    }

    def feed(self, term):
        transition = self.TRANSITIONS.get((self.state, classify(term)))
        if transition is None:
            return False
        next_state = transition(self, term)
        if next_state is None:
            return False
        self.state = next_state
        return True

    def result(self, is_valid):
        return ParsedQuery(
            amount=self.amount,
            base_currency=self.base,
            target_currencies=tuple(self.targets),
            is_valid=is_valid,
        )


def parse_query(search):
    terms = search.split()
    walker = _QueryWalker()
    if len(terms) not in VALID_TERM_COUNTS:
        return walker.result(False)

    for term in terms:
        if not walker.feed(term):
            return walker.result(False)

    if not walker.completed or walker.base is None:
        return walker.result(False)
    if walker.amount is None and not walker.targets:
        return walker.result(False)
    if len(walker.targets) == 1 and walker.targets[0] == walker.base:
        return walker.result(False)
    return walker.result(True)


def parse_currency_list(raw):
    codes = [c.strip().upper() for c in raw.split(',')]
    return [c for c in codes if is_currency_code(c)]


def format_number(value):
    """Fixed point with 4 decimals, trailing zeros and a bare '.' stripped."""
    if math.isnan(value):
        return 'NaN'
    if math.isinf(value):
        return 'Infinity' if value > 0 else '-Infinity'
    # -0.0 prints as 0
    value = value + 0.0
    fixed = Decimal(value).quantize(FOUR_PLACES, rounding=ROUND_HALF_UP, context=WIDE_CONTEXT)
    return f'{fixed:f}'.rstrip('0').rstrip('.')


def format_conversion(base_currency, target_currency, amount, rate):
    converted = float(amount) * rate
    inverse = 1 / rate
    converted_str = format_number(converted)
    inverse_str = format_number(inverse)

    return ConversionRecord(
        base_currency=base_currency,
        target_currency=target_currency,
        amount=amount,
        converted_amount=converted,
        inverse_rate=inverse,
        title=f"{amount} {base_currency} = {converted_str} {target_currency}",
        subtitle=f"1 {target_currency} = {inverse_str} {base_currency}. Press Enter to copy",
        copy_text=converted_str,
    )
