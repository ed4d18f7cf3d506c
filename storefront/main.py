from __future__ import annotations
import os, json, logging
from contextlib import asynccontextmanager
from typing import List, Optional, Union

from dotenv import load_dotenv
load_dotenv()

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from pydantic import BaseModel, Field

from .services.cache import TTLCache, default_cache, SWEEP_INTERVAL
from .services.pricing import (
    calculate_order_totals, FREE_SHIPPING_THRESHOLD, FLAT_SHIPPING_RATE, TAX_RATE
)
from .utils import (
    format_price, generate_sku, generate_order_number, slugify, safe_float, round_money
)

QUOTE_TTL = float(os.getenv("QUOTE_CACHE_TTL", "300"))
SKU_PREFIX = os.getenv("SKU_PREFIX", "KN3D")

log = logging.getLogger("uvicorn.error")

@asynccontextmanager
async def lifespan(app: FastAPI):
    cache: TTLCache = app.state.cache
    cache.start_sweeper(SWEEP_INTERVAL)
    log.info("cache sweeper started (every %.0fs)", SWEEP_INTERVAL)
    try:
        yield
    finally:
        await cache.stop_sweeper()
        log.info("cache sweeper stopped")

app = FastAPI(title="kn3d-storefront", version="0.1.0", lifespan=lifespan)
app.state.cache = default_cache

def get_cache(request: Request) -> TTLCache:
    return request.app.state.cache

class CartLine(BaseModel):
    price: Union[float, str]
    quantity: int = Field(default=1, ge=1)

class QuoteRequest(BaseModel):
    items: List[CartLine]

@app.get("/")
async def root():
    return {"ok": True, "service": "kn3d-storefront"}

@app.get("/health")
async def health(cache: TTLCache = Depends(get_cache)):
    return {"ok": True, "cache_entries": len(cache), "sweeping": cache.sweeping}

@app.post("/pricing/quote")
def quote(body: QuoteRequest, cache: TTLCache = Depends(get_cache)):
    lines = [{"price": str(l.price), "quantity": l.quantity} for l in body.items]
    # 9, 9.0 y "9" son el mismo carrito
    norm = [[safe_float(l.price), l.quantity] for l in body.items]
    key = "quote:" + json.dumps([norm, FREE_SHIPPING_THRESHOLD, FLAT_SHIPPING_RATE, TAX_RATE])
    cached = cache.get(key)
    if cached is not None:
        return {**cached, "cached": True}
    try:
        t = calculate_order_totals(lines, FREE_SHIPPING_THRESHOLD, FLAT_SHIPPING_RATE, TAX_RATE)
    except ValueError as e:
        log.warning("quote rejected: %s", e)
        raise HTTPException(status_code=422, detail=str(e))
    result = {
        "subtotal": round_money(t.subtotal),
        "shipping": round_money(t.shipping),
        "tax": round_money(t.tax),
        "total": round_money(t.total),
        "formatted": {
            "subtotal": format_price(t.subtotal),
            "shipping": format_price(t.shipping),
            "tax": format_price(t.tax),
            "total": format_price(t.total),
        },
    }
    cache.set(key, result, QUOTE_TTL)
    return {**result, "cached": False}

@app.get("/utils/slug")
async def slug(text: str = Query(..., description="Texto a convertir")):
    return {"slug": slugify(text)}

@app.get("/utils/sku")
async def sku(prefix: Optional[str] = Query(default=None)):
    return {"sku": generate_sku(prefix or SKU_PREFIX)}

@app.get("/utils/order-number")
async def order_number():
    return {"order_number": generate_order_number()}

@app.delete("/cache")
async def clear_cache(key: Optional[str] = Query(default=None), cache: TTLCache = Depends(get_cache)):
    cache.clear(key)
    return {"ok": True, "cleared": key or "*", "cache_entries": len(cache)}
