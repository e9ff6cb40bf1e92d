"""
Currency, date and percentage formatting for report output.

Currency strings follow the locale conventions of each currency
(symbol placement, digit grouping, decimal places). Rendering surfaces
that cannot draw every glyph declare their limits in
SURFACE_GLYPH_FALLBACKS / SURFACE_CHARSETS and get ASCII substitutes:

    >>> format_currency(100000, "INR")
    '₹1,00,000.00'
    >>> format_currency(100000, "INR", surface=RenderSurface.PDF)
    'Rs.1,00,000.00'
"""

import logging
import re as _re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from enum import Enum
from typing import Dict, Optional, Union

logger = logging.getLogger(__name__)

_MONTH_ABBREVS = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]


class RenderSurface(str, Enum):
    """Where a formatted string ends up"""

    PDF = "pdf"
    CSV = "csv"
    XLSX = "xlsx"


@dataclass(frozen=True)
class CurrencyFormat:
    """Locale conventions for one currency."""
    locale: str
    symbol: str
    decimals: int = 2
    group_sep: str = ","
    decimal_sep: str = "."
    symbol_spaced: bool = False  # "CHF 1'000.00" vs "$1,000.00"
    indian_grouping: bool = False  # 1,00,000 instead of 100,000


CURRENCY_FORMATS: Dict[str, CurrencyFormat] = {
    "USD": CurrencyFormat(locale="en-US", symbol="$"),
    "EUR": CurrencyFormat(locale="en-EU", symbol="€"),
    "GBP": CurrencyFormat(locale="en-GB", symbol="£"),
    "JPY": CurrencyFormat(locale="ja-JP", symbol="￥", decimals=0),
    "INR": CurrencyFormat(locale="en-IN", symbol="₹", indian_grouping=True),
    "CAD": CurrencyFormat(locale="en-CA", symbol="$"),
    "AUD": CurrencyFormat(locale="en-AU", symbol="$"),
    "CHF": CurrencyFormat(locale="de-CH", symbol="CHF", group_sep="’", symbol_spaced=True),
}

CURRENCY_LOCALES: Dict[str, str] = {code: fmt.locale for code, fmt in CURRENCY_FORMATS.items()}

# Glyphs each surface cannot draw, with the text drawn in their place.
# PDF uses the core Helvetica font, which only encodes Latin-1.
SURFACE_GLYPH_FALLBACKS: Dict[RenderSurface, Dict[str, str]] = {
    RenderSurface.PDF: {
        # Currency symbols
        "₹": "Rs.",   # Indian rupee
        "€": "EUR ",  # euro
        "￥": "¥",  # fullwidth yen -> Latin-1 yen
        "₩": "W",     # won
        "₽": "RUB ",  # ruble
        "₱": "PHP ",  # peso
        "₺": "TRY ",  # lira
        "₦": "NGN ",  # naira
        # Typography
        "–": "-",     # en-dash
        "—": "--",    # em-dash
        "‘": "'",     # left single quote
        "’": "'",     # right single quote / Swiss group separator
        "“": '"',     # left double quote
        "”": '"',     # right double quote
        "…": "...",   # ellipsis
        "•": "*",     # bullet
        "\u00a0": " ",  # non-breaking space
        "\u202f": " ",  # narrow non-breaking space
        "−": "-",     # minus sign
        "✓": "",      # check mark
        "✗": "",      # ballot x
    },
    RenderSurface.CSV: {},
    RenderSurface.XLSX: {},
}

# Character set each surface can encode; None means full Unicode.
SURFACE_CHARSETS: Dict[RenderSurface, Optional[str]] = {
    RenderSurface.PDF: "latin-1",
    RenderSurface.CSV: None,
    RenderSurface.XLSX: None,
}

# Regex to strip emoji characters (Helvetica lacks emoji glyphs)
_EMOJI_RE = _re.compile(
    "["
    "\U0001F300-\U0001F9FF"  # Misc Symbols, Emoticons, Supplemental Symbols
    "\U0000FE00-\U0000FE0F"  # Variation Selectors
    "\U0000200D"             # Zero Width Joiner
    "]+",
)

Number = Union[int, float, Decimal]


def apply_glyph_fallback(text: str, surface: Optional[RenderSurface]) -> str:
    """Replace characters the surface cannot draw with their declared substitutes."""
    if surface is None or not text:
        return text
    surface = RenderSurface(surface)
    fallbacks = SURFACE_GLYPH_FALLBACKS.get(surface, {})
    charset = SURFACE_CHARSETS.get(surface)
    if charset:
        text = _EMOJI_RE.sub("", text)
    for glyph, replacement in fallbacks.items():
        if glyph in text:
            text = text.replace(glyph, replacement)
    if charset:
        # Anything still outside the charset becomes "?"
        text = text.encode(charset, errors="replace").decode(charset)
    return text


def sanitize_for_pdf(text: str) -> str:
    """Make arbitrary text drawable with the PDF core font."""
    return apply_glyph_fallback(str(text), RenderSurface.PDF)


def _to_decimal(value: Number) -> Optional[Decimal]:
    try:
        dec = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return None
    # NaN and infinities have no printable figure
    return dec if dec.is_finite() else None


def _round(value: Decimal, decimals: int) -> Decimal:
    """Round half-up to `decimals` places, whatever the magnitude."""
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + decimals + 2)
        return value.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)


def _group_digits(digits: str, sep: str, indian: bool) -> str:
    if indian and len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        pairs = []
        while len(head) > 2:
            pairs.insert(0, head[-2:])
            head = head[:-2]
        if head:
            pairs.insert(0, head)
        return sep.join(pairs + [tail])
    groups = []
    while len(digits) > 3:
        groups.insert(0, digits[-3:])
        digits = digits[:-3]
    groups.insert(0, digits)
    return sep.join(groups)


def format_currency(
    amount: Optional[Number],
    currency: str = "USD",
    surface: Optional[RenderSurface] = None,
) -> str:
    """
    Format an amount as a currency string in the currency's home locale.

    Args:
        amount: Already-rounded amount (None renders as an empty string)
        currency: ISO 4217 code; unknown codes render as "XYZ 1,234.56"
        surface: Target surface; glyphs it cannot draw are substituted.
            None (or CSV/XLSX) keeps the native symbol.

    Returns:
        Formatted string like "$1,234.56", "₹1,00,000.00" or "CHF 1’000.00"
    """
    value = _to_decimal(amount) if amount is not None else None
    if value is None:
        return ""

    code = (currency or "USD").upper()
    fmt = CURRENCY_FORMATS.get(code)
    if fmt is None:
        fmt = CurrencyFormat(locale="en-US", symbol=code, symbol_spaced=True)

    rounded = _round(value, fmt.decimals)
    negative = rounded < 0
    integer_part, _, fraction = f"{rounded.copy_abs():f}".partition(".")

    number = _group_digits(integer_part, fmt.group_sep, fmt.indian_grouping)
    if fmt.decimals:
        number = f"{number}{fmt.decimal_sep}{fraction}"

    space = " " if fmt.symbol_spaced else ""
    formatted = f"{'-' if negative else ''}{fmt.symbol}{space}{number}"
    return apply_glyph_fallback(formatted, surface).strip()


def format_date(value: Union[date, datetime, str, None]) -> str:
    """
    Format a date for display: "Jan 5, 2024".

    ISO strings (date or datetime) are parsed; anything unparseable is
    returned unchanged so the source value still reaches the document.
    """
    if value is None or value == "":
        return ""
    if isinstance(value, str):
        raw = value.strip()
        try:
            value = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            logger.debug(f"Unparseable date value left as-is: {raw!r}")
            return raw
    return f"{_MONTH_ABBREVS[value.month - 1]} {value.day}, {value.year}"


def format_number(value: Optional[Number], decimals: int = 2) -> str:
    dec = _to_decimal(value) if value is not None else None
    if dec is None:
        return ""
    return f"{_round(dec, decimals):f}"


def format_percentage(value: Optional[Number]) -> str:
    """Format a pre-computed percentage: 12.345 -> "12.35%"."""
    number = format_number(value, 2)
    return f"{number}%" if number else ""
