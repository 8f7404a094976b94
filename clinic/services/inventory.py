import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.db.models import Count, DecimalField, ExpressionWrapper, F, Sum
from django.utils import timezone

from clinic.models import InventoryItem

logger = logging.getLogger(__name__)


class StockError(Exception):
    """Raised when a stock adjustment cannot be applied."""


def derive_inventory_status(quantity: int, min_quantity: int, expiry_date: Optional[date], today: date) -> str:
    """Return the stock status for an item.

    Quantity decides first (out of stock, low stock, in stock); an expiry
    date before ``today`` then overrides whatever the quantity said, so an
    expired item with no stock left still reports ``expired``.
    """
    if quantity <= 0:
        status = InventoryItem.STATUS_OUT_OF_STOCK
    elif quantity <= min_quantity:
        status = InventoryItem.STATUS_LOW_STOCK
    else:
        status = InventoryItem.STATUS_IN_STOCK
    if expiry_date and expiry_date < today:
        status = InventoryItem.STATUS_EXPIRED
    return status


@transaction.atomic
def adjust_stock(item_id: int, quantity: int, operation: str) -> InventoryItem:
    item = InventoryItem.objects.select_for_update().get(pk=item_id)
    if operation == 'add':
        new_quantity = item.quantity + quantity
    elif operation == 'subtract':
        new_quantity = item.quantity - quantity
        if new_quantity < 0:
            raise StockError('Insufficient stock')
    else:
        raise StockError('Invalid operation. Use "add" or "subtract"')
    logger.info("stock %s %s x%s: %s -> %s", item.pk, operation, quantity, item.quantity, new_quantity)
    item.quantity = new_quantity
    item.save()
    return item


def low_stock_items():
    return InventoryItem.objects.filter(
        status__in=[InventoryItem.STATUS_LOW_STOCK, InventoryItem.STATUS_OUT_OF_STOCK]
    ).order_by('quantity')


def expired_items(today: Optional[date] = None):
    today = today or timezone.localdate()
    return InventoryItem.objects.filter(expiry_date__lt=today).order_by('expiry_date')


def expiring_soon_items(today: Optional[date] = None, days: Optional[int] = None):
    today = today or timezone.localdate()
    days = settings.INVENTORY_EXPIRING_SOON_DAYS if days is None else days
    return InventoryItem.objects.filter(
        expiry_date__range=(today, today + timedelta(days=days))
    ).order_by('expiry_date')


def inventory_stats() -> dict:
    qs = InventoryItem.objects.all()
    value = qs.exclude(status=InventoryItem.STATUS_EXPIRED).aggregate(
        total=Sum(ExpressionWrapper(F('quantity') * F('unit_price'),
                                    output_field=DecimalField(max_digits=14, decimal_places=2)))
    )['total']
    categories = qs.values('category').annotate(count=Count('id')).order_by('category')
    return {
        'totalItems': qs.count(),
        'lowStockItems': qs.filter(status=InventoryItem.STATUS_LOW_STOCK).count(),
        'outOfStockItems': qs.filter(status=InventoryItem.STATUS_OUT_OF_STOCK).count(),
        'expiredItems': qs.filter(status=InventoryItem.STATUS_EXPIRED).count(),
        'totalValue': str((value or Decimal('0')).quantize(Decimal('0.01'))),
        'categoryCount': [{'category': c['category'], 'count': c['count']} for c in categories],
    }


def format_item(item: InventoryItem) -> dict:
    return {
        'id': item.id,
        'itemName': item.item_name,
        'category': item.category,
        'quantity': item.quantity,
        'minQuantity': item.min_quantity,
        'unitPrice': str(item.unit_price),
        'supplier': item.supplier,
        'expiryDate': item.expiry_date.isoformat() if item.expiry_date else None,
        'batchNumber': item.batch_number,
        'description': item.description,
        'status': item.status,
        'createdAt': item.created_at.isoformat() if item.created_at else None,
        'updatedAt': item.updated_at.isoformat() if item.updated_at else None,
    }
