"""Recalibration submission window and count preparation"""
from django.conf import settings

from bhandar.core import timeutils
from bhandar.production.stock import stock_status


def in_recalibration_window(day=None):
    day = day or timeutils.today()
    first, last = settings.BHANDAR_RECALIBRATION_WINDOW_DAYS
    return first <= day.day <= last


def draft_items(location_type, location_id):
    """One row per finished product with the ledger's quantity as both system and actual count"""
    rows = []
    for row in stock_status(location_type, location_id):
        system = int(row['current_stock'])
        rows.append({
            'item_key': row['item_key'],
            'item_name': row['item_name'],
            'category': 'finished_product',
            'unit': row['unit'],
            'system_quantity': system,
            'actual_quantity': system,
            'difference': 0,
            'adjustment_type': None,
            'notes': '',
        })
    return rows


def build_counted_items(location_type, location_id, counts):
    """
    Merge submitted counts with the system quantities.

    Returns (rows, errors). Every non-zero difference needs an adjustment
    type; a zero difference clears it.
    """
    system_rows = {row['item_key']: row for row in draft_items(location_type, location_id)}
    rows = []
    errors = {}
    for count in counts:
        key = count['item_key']
        base = system_rows.get(key)
        if base is None:
            errors[key] = 'Unknown item for this location'
            continue
        difference = count['actual_quantity'] - base['system_quantity']
        adjustment = count.get('adjustment_type') or None
        if difference == 0:
            adjustment = None
        elif adjustment is None:
            errors[key] = 'Select wastage or counting error for items with a difference'
            continue
        rows.append({
            **base,
            'actual_quantity': count['actual_quantity'],
            'difference': difference,
            'adjustment_type': adjustment,
            'notes': count.get('notes', ''),
        })
    return rows, errors
