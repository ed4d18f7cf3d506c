from __future__ import annotations
import re, time, random, string, unicodedata
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional, Union

CURRENCY_SYMBOL = "S/"
ZERO_PRICE = f"{CURRENCY_SYMBOL} 0.00"
_CENT = Decimal("0.01")

_B36 = string.digits + string.ascii_uppercase
_MONTHS = ["enero", "febrero", "marzo", "abril", "mayo", "junio", "julio",
           "agosto", "septiembre", "octubre", "noviembre", "diciembre"]
_MONTHS_SHORT = ["ene.", "feb.", "mar.", "abr.", "may.", "jun.", "jul.",
                 "ago.", "set.", "oct.", "nov.", "dic."]

_COMBINING = re.compile(r"[\u0300-\u036f]")
_SPACES = re.compile(r"\s+")
_NON_WORD = re.compile(r"[^\w-]+", re.ASCII)
_HYPHENS = re.compile(r"--+")

def now_ms() -> int:
    return int(time.time() * 1000)

def safe_float(v: Any, default: float | None = None) -> Optional[float]:
    try:
        if v is None: return default
        return float(v)
    except Exception:
        return default

def _rand(k: int) -> str:
    # no criptográfico: solo códigos visibles
    return "".join(random.choices(_B36, k=k))

def format_price(price: Union[float, int, str, None]) -> str:
    """Render a price as es-PE soles, e.g. ``S/ 1,124.99``.

    Falsy or unparseable input renders the canonical zero string.
    """
    if not price:
        return ZERO_PRICE
    value = safe_float(price, 0.0)
    if value != value or value in (float("inf"), float("-inf")):
        return ZERO_PRICE
    cents = _cents(abs(value))
    sign = "-" if value < 0 and cents else ""
    return f"{sign}{CURRENCY_SYMBOL} {cents:,.2f}"

def _cents(value: float) -> Decimal:
    # mitades hacia arriba, como Intl.NumberFormat
    return Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP)

def round_money(value: float) -> float:
    return float(_cents(value))

def generate_sku(prefix: str = "KN3D") -> str:
    return f"{prefix}-{str(now_ms())[-6:]}-{_rand(3)}"

def generate_order_number() -> str:
    return f"KN3D-{now_ms()}-{_rand(6)}"

def slugify(text: str) -> str:
    s = unicodedata.normalize("NFD", str(text))
    s = _COMBINING.sub("", s).lower().strip()
    s = _SPACES.sub("-", s)
    s = _NON_WORD.sub("", s)
    return _HYPHENS.sub("-", s)

def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length].rstrip() + "..."

def _to_datetime(value: Union[datetime, date, str]) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    s = str(value).strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    return datetime.fromisoformat(s)

def format_date(value: Union[datetime, date, str]) -> str:
    """``19 de octubre de 2026``"""
    d = _to_datetime(value)
    return f"{d.day} de {_MONTHS[d.month - 1]} de {d.year}"

def format_datetime(value: Union[datetime, date, str]) -> str:
    """``19 oct. 2026, 02:30 p. m.`` (reloj de 12 horas)"""
    d = _to_datetime(value)
    hour = d.hour % 12 or 12
    marker = "p. m." if d.hour >= 12 else "a. m."
    return f"{d.day} {_MONTHS_SHORT[d.month - 1]} {d.year}, {hour:02d}:{d.minute:02d} {marker}"
