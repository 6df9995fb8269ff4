"""
Stock balance arithmetic.

Quantities are kept as {item_key: quantity} maps. Months are "YYYY-MM"
strings so they sort chronologically and can be used as dict keys.
"""
import re


def month_key(value):
    return f"{value.year:04d}-{value.month:02d}"


def _split(month):
    year, mon = month.split('-')
    return int(year), int(mon)


def previous_month(month):
    year, mon = _split(month)
    if mon == 1:
        return f"{year - 1:04d}-12"
    return f"{year:04d}-{mon - 1:02d}"


def next_month(month):
    year, mon = _split(month)
    if mon == 12:
        return f"{year + 1:04d}-01"
    return f"{year:04d}-{mon + 1:02d}"


def add_totals(*maps):
    result = {}
    for totals in maps:
        for key, quantity in (totals or {}).items():
            result[key] = result.get(key, 0) + quantity
    return result


def subtract_totals(left, right):
    result = dict(left or {})
    for key, quantity in (right or {}).items():
        result[key] = result.get(key, 0) - quantity
    return result


def closing_balance(opening, inflow, outflow):
    return subtract_totals(add_totals(opening, inflow), outflow)


def carry_forward(recalibration_month, actual, flows_by_month, target_month, uncounted=None):
    """
    Opening balance of target_month starting from a physical count.

    The count taken in recalibration_month is that month's opening balance;
    each later month opens with the previous month's closing balance.
    flows_by_month maps "YYYY-MM" to an (inflow, outflow) pair. Items missing
    from the count open with their balance in uncounted.
    """
    if recalibration_month > target_month:
        raise ValueError(f"Recalibration {recalibration_month} is after {target_month}")
    balance = {**(uncounted or {}), **(actual or {})}
    month = recalibration_month
    while month < target_month:
        inflow, outflow = flows_by_month.get(month, ({}, {}))
        balance = closing_balance(balance, inflow, outflow)
        month = next_month(month)
    return balance


def opening_without_recalibration(flows_by_month, target_month):
    """No count on record: previous month's net movement, zero before that"""
    inflow, outflow = flows_by_month.get(previous_month(target_month), ({}, {}))
    return subtract_totals(inflow, outflow)


LEVEL_CRITICAL = 'critical'
LEVEL_LOW = 'low'
LEVEL_MEDIUM = 'medium'
LEVEL_HIGH = 'high'


def classify_stock(stock, thresholds):
    if stock <= 0:
        return LEVEL_CRITICAL
    if stock <= thresholds['low']:
        return LEVEL_LOW
    if stock < thresholds['high']:
        # medium and the warning band below high both report medium
        return LEVEL_MEDIUM
    return LEVEL_HIGH


def normalize_item_key(text):
    """"Chicken Cheese Momos" -> "chicken_cheese_momos" """
    return re.sub(r'[^a-z0-9]+', '_', (text or '').lower()).strip('_')


def match_item_key(text, known_keys):
    """Map a free-text item name onto a catalog key, tolerating plurals and a trailing "momo" """
    key = normalize_item_key(text)
    candidates = [key]
    if key.endswith('s'):
        candidates.append(key[:-1])
    for suffix in ('_momos', '_momo'):
        if key.endswith(suffix):
            candidates.append(key[:-len(suffix)])
    for candidate in candidates:
        if candidate in known_keys:
            return candidate
    return None
