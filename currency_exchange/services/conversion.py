"""Conversion of whole-cent amounts between the home currency and a foreign one."""

from __future__ import annotations

import math

from currency_exchange.models import HOME_CURRENCY_ID, Rate, normalize_code


def convert(
    cents: int,
    source_currency_id: str,
    target_currency_id: str,
    rate: Rate,
    *,
    is_sell: bool,
    home_currency_id: str = HOME_CURRENCY_ID,
) -> int:
    """Convert ``cents`` of ``source_currency_id`` into cents of ``target_currency_id``.

    ``is_sell`` is True when the user types the amount they give away. The ask
    price applies when home currency is received on a sell or spent on a buy;
    the bid price applies otherwise. Rates are quoted per unit of home currency,
    so amounts leaving the home currency multiply and amounts entering it divide.
    Sells round down and buys round up, never in the user's favour.

    Raises:
        ValueError: If ``cents`` is negative or neither side is the home currency.
    """

    if cents < 0:
        raise ValueError("Amount to convert cannot be negative.")

    source = normalize_code(source_currency_id)
    target = normalize_code(target_currency_id)
    home = normalize_code(home_currency_id)
    if home not in (source, target):
        raise ValueError(f"Conversion must involve the home currency {home}.")

    is_ask = target == home if is_sell else source == home
    rate_value = rate.ask if is_ask else rate.bid
    multiplier = rate_value if source == home else 1 / rate_value

    result = cents * multiplier
    return int(math.floor(result) if is_sell else math.ceil(result))
