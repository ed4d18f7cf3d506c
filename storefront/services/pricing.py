from __future__ import annotations
import os, math
from typing import Any, Iterable, Mapping, NamedTuple

from ..utils import safe_float

FREE_SHIPPING_THRESHOLD = float(os.getenv("FREE_SHIPPING_THRESHOLD", "200"))
FLAT_SHIPPING_RATE = float(os.getenv("FLAT_SHIPPING_RATE", "15.00"))
TAX_RATE = float(os.getenv("TAX_RATE", "0.18"))  # IGV Perú

class OrderTotals(NamedTuple):
    subtotal: float
    shipping: float
    tax: float
    total: float

def _amount(name: str, v: Any) -> float:
    x = safe_float(v)
    if x is None or not math.isfinite(x):
        raise ValueError(f"{name} must be a finite number, got {v!r}")
    if x < 0:
        raise ValueError(f"{name} must not be negative, got {v!r}")
    return x

def calculate_shipping(total: float, free_shipping_threshold: float = FREE_SHIPPING_THRESHOLD,
                       flat_rate: float = FLAT_SHIPPING_RATE) -> float:
    total = _amount("total", total)
    if total >= _amount("free_shipping_threshold", free_shipping_threshold):
        return 0.0
    return _amount("flat_rate", flat_rate)

def calculate_tax(subtotal: float, tax_rate: float = TAX_RATE) -> float:
    return _amount("subtotal", subtotal) * _amount("tax_rate", tax_rate)

def calculate_order_totals(items: Iterable[Mapping[str, Any]],
                           free_shipping_threshold: float = FREE_SHIPPING_THRESHOLD,
                           flat_rate: float = FLAT_SHIPPING_RATE,
                           tax_rate: float = TAX_RATE) -> OrderTotals:
    """Price a cart: each item needs ``price`` (number or numeric string) and ``quantity``.

    Shipping is decided on the pre-tax subtotal; ``total = subtotal + shipping + tax``.
    """
    subtotal = 0.0
    for i, it in enumerate(items):
        price = _amount(f"items[{i}].price", it.get("price"))
        qty = _amount(f"items[{i}].quantity", it.get("quantity", 1))
        subtotal += price * qty
    shipping = calculate_shipping(subtotal, free_shipping_threshold, flat_rate)
    tax = calculate_tax(subtotal, tax_rate)
    return OrderTotals(subtotal, shipping, tax, subtotal + shipping + tax)
