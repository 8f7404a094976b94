"""
Inventory views.
"""
from __future__ import annotations

from django.db.models import Q
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.models import InventoryItem, User
from clinic.permissions import IsAdmin, IsAdminOrNurse
from clinic.responses import fail, not_found, ok, paginate
from clinic.serializers.inventory import InventoryListQuerySerializer, ItemSerializer, StockUpdateSerializer
from clinic.services.inventory import (
    StockError,
    adjust_stock,
    expired_items,
    expiring_soon_items,
    format_item,
    inventory_stats as compute_inventory_stats,
    low_stock_items,
)

FIELD_MAP = (
    ('itemName', 'item_name'),
    ('category', 'category'),
    ('quantity', 'quantity'),
    ('minQuantity', 'min_quantity'),
    ('unitPrice', 'unit_price'),
    ('supplier', 'supplier'),
    ('expiryDate', 'expiry_date'),
    ('batchNumber', 'batch_number'),
    ('description', 'description'),
)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def inventory(request):
    if request.method == 'GET':
        q = InventoryListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        v = q.validated_data
        qs = InventoryItem.objects.all()
        if v.get('category'):
            qs = qs.filter(category=v['category'])
        if v.get('status'):
            qs = qs.filter(status=v['status'])
        if v.get('search'):
            qs = qs.filter(Q(item_name__icontains=v['search']) | Q(supplier__icontains=v['search']))
        return ok(paginate(qs, v['page'], v['limit'], 'items', format_item))

    if request.user.role != User.ROLE_ADMIN:
        return fail('You do not have permission to perform this action', status=403)
    s = ItemSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    item = InventoryItem.objects.create(**{dst: v[src] for src, dst in FIELD_MAP if src in v})
    return ok(format_item(item), message='Item created successfully', status=201)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdmin])
def inventory_stats(request):
    return ok(compute_inventory_stats())


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def inventory_low_stock(request):
    return ok([format_item(i) for i in low_stock_items()])


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def inventory_expired(request):
    return ok([format_item(i) for i in expired_items()])


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def inventory_expiring_soon(request):
    return ok([format_item(i) for i in expiring_soon_items()])


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def inventory_detail(request, pk: int):
    item = InventoryItem.objects.filter(pk=pk).first()
    if item is None:
        return not_found('Item')
    if request.method == 'GET':
        return ok(format_item(item))

    if request.user.role != User.ROLE_ADMIN:
        return fail('You do not have permission to perform this action', status=403)
    if request.method == 'DELETE':
        item.delete()
        return ok(message='Item deleted successfully')

    s = ItemSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    for src, dst in FIELD_MAP:
        if src in v:
            setattr(item, dst, v[src])
    item.save()
    return ok(format_item(item), message='Item updated successfully')


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsAdminOrNurse])
def inventory_stock(request, pk: int):
    if not InventoryItem.objects.filter(pk=pk).exists():
        return not_found('Item')
    s = StockUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    try:
        item = adjust_stock(pk, s.validated_data['quantity'], s.validated_data['operation'])
    except StockError as e:
        return fail(str(e))
    return ok(format_item(item), message='Stock updated successfully')
