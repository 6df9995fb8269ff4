"""
Stock position of finished products at a store or production house.

Stores receive delivered production requests and sell through item sales.
Production houses produce approved batches and send shipped requests.
"""
import calendar
import logging
from datetime import date

from django.conf import settings
from django.db.models import Sum

from bhandar.catalog.constants import ENTITY_STORE, ENTITY_PRODUCTION_HOUSE
from bhandar.catalog.models import InventoryItem
from bhandar.core import timeutils
from bhandar.locations.models import Store, ProductionHouse
from bhandar.sales.models import ItemSale
from . import ledger
from .models import ProductionBatchLine, ProductionBatch, ProductionRequestLine, ProductionRequest, StockThreshold

logger = logging.getLogger('bhandar.production')

LOCATION_TYPES = (ENTITY_STORE, ENTITY_PRODUCTION_HOUSE)


def resolve_location(location_type, location_id):
    """Store / ProductionHouse for the pair, or None when unknown"""
    model = {ENTITY_STORE: Store, ENTITY_PRODUCTION_HOUSE: ProductionHouse}.get(location_type)
    if model is None or not location_id:
        return None
    try:
        return model.objects.filter(pk=int(location_id)).first()
    except (TypeError, ValueError):
        return None


def finished_items(location_type, location_id):
    return InventoryItem.objects.active().visible_to(location_type, location_id).filter(category='finished_product')


def unique_by_key(items):
    """One item per catalog key; a global item and a scoped one may share a name"""
    seen = set()
    unique = []
    for item in items:
        if item.name not in seen:
            seen.add(item.name)
            unique.append(item)
    return unique


def month_bounds(month):
    year, mon = (int(part) for part in month.split('-'))
    return date(year, mon, 1), date(year, mon, calendar.monthrange(year, mon)[1])


def _sum_by_item(queryset, quantity_field):
    rows = queryset.values('item__name').annotate(total=Sum(quantity_field))
    return {row['item__name']: int(row['total'] or 0) for row in rows}


def month_flows(location_type, location_id, month):
    """(inflow, outflow) maps for one month"""
    first, last = month_bounds(month)

    if location_type == ENTITY_STORE:
        inflow = _sum_by_item(ProductionRequestLine.objects.filter(
            request__store_id=location_id,
            request__status=ProductionRequest.STATUS_DELIVERED,
            request__delivered_date__gte=first,
            request__delivered_date__lte=last,
        ), 'quantity')

        known_keys = set(finished_items(location_type, location_id).values_list('name', flat=True))
        outflow = {}
        sales = ItemSale.objects.filter(store_id=location_id, date__gte=first, date__lte=last)
        for row in sales.values('item_name').annotate(total=Sum('quantity')):
            key = ledger.match_item_key(row['item_name'], known_keys)
            if key is None:
                continue
            outflow[key] = outflow.get(key, 0) + int(row['total'] or 0)
        return inflow, outflow

    inflow = _sum_by_item(ProductionBatchLine.objects.filter(
        batch__production_house_id=location_id,
        batch__approval_status=ProductionBatch.STATUS_APPROVED,
        batch__date__gte=first,
        batch__date__lte=last,
    ), 'final')
    outflow = _sum_by_item(ProductionRequestLine.objects.filter(
        request__production_house_id=location_id,
        request__status__in=[ProductionRequest.STATUS_SHIPPED, ProductionRequest.STATUS_DELIVERED],
        request__shipped_at__date__gte=first,
        request__shipped_at__date__lte=last,
    ), 'quantity')
    return inflow, outflow


def flows_between(location_type, location_id, start_month, end_month):
    """Flows for every month from start_month up to but excluding end_month"""
    flows = {}
    month = start_month
    while month < end_month:
        flows[month] = month_flows(location_type, location_id, month)
        month = ledger.next_month(month)
    return flows


def latest_recalibration(location_type, location_id, month):
    from bhandar.recalibration.models import StockRecalibration

    return StockRecalibration.objects.filter(
        location_type=location_type,
        location_id=location_id,
        month__lte=month,
    ).exclude(status=StockRecalibration.STATUS_REJECTED).order_by('-month', '-created_at').first()


def opening_balance(location_type, location_id, month, counted_up_to=None):
    """
    Opening balance of month, using only counts taken in or before counted_up_to
    (defaults to month itself).
    """
    recalibration = latest_recalibration(location_type, location_id, counted_up_to or month)
    if recalibration is not None:
        actual = {item.item_key: int(item.actual_quantity) for item in recalibration.items.all()}
        # Items left out of the count keep the balance the books had before it
        uncounted = opening_balance(location_type, location_id, recalibration.month,
                                    counted_up_to=ledger.previous_month(recalibration.month))
        flows = flows_between(location_type, location_id, recalibration.month, month)
        return ledger.carry_forward(recalibration.month, actual, flows, month, uncounted=uncounted)

    previous = ledger.previous_month(month)
    flows = {previous: month_flows(location_type, location_id, previous)}
    return ledger.opening_without_recalibration(flows, month)


def default_thresholds():
    return dict(settings.BHANDAR_DEFAULT_THRESHOLDS)


def store_thresholds(store, items):
    """{item_key: {high, medium, low}} with defaults for items never configured"""
    configured = {
        t.item.name: {'high': t.high, 'medium': t.medium, 'low': t.low}
        for t in StockThreshold.objects.filter(store=store, item__in=items).select_related('item')
    }
    return {item.name: configured.get(item.name, default_thresholds()) for item in items}


def stock_status(location_type, location_id, month=None):
    """Per finished item: opening, inflow, outflow, current stock and (for stores) level"""
    month = month or ledger.month_key(timeutils.today())
    items = unique_by_key(finished_items(location_type, location_id))
    opening = opening_balance(location_type, location_id, month)
    inflow, outflow = month_flows(location_type, location_id, month)
    current = ledger.closing_balance(opening, inflow, outflow)

    thresholds = {}
    if location_type == ENTITY_STORE:
        thresholds = store_thresholds(location_id, items)

    in_label, out_label = ('received', 'sold') if location_type == ENTITY_STORE else ('produced', 'sent')
    rows = []
    for item in items:
        row = {
            'item_key': item.name,
            'item_name': item.display_name,
            'unit': item.unit,
            'opening': opening.get(item.name, 0),
            in_label: inflow.get(item.name, 0),
            out_label: outflow.get(item.name, 0),
            'current_stock': current.get(item.name, 0),
        }
        if location_type == ENTITY_STORE:
            row['thresholds'] = thresholds[item.name]
            row['level'] = ledger.classify_stock(row['current_stock'], row['thresholds'])
        rows.append(row)
    logger.debug(f"Computed stock for {location_type} {location_id} {month}: {len(rows)} items")
    return rows
