from rest_framework import serializers

from .common import CleanCharField, PageQuerySerializer

CATEGORIES = ['medicine', 'equipment', 'supplies', 'consumables']
STATUSES = ['in_stock', 'low_stock', 'out_of_stock', 'expired']


class InventoryListQuerySerializer(PageQuerySerializer):
    category = serializers.ChoiceField(choices=CATEGORIES, required=False)
    status = serializers.ChoiceField(choices=STATUSES, required=False)
    search = serializers.CharField(required=False, allow_blank=True, max_length=64)


class ItemSerializer(serializers.Serializer):
    """Create payload; used with ``partial=True`` for updates."""
    itemName = CleanCharField(max_length=255)
    category = serializers.ChoiceField(choices=CATEGORIES)
    quantity = serializers.IntegerField(min_value=0, default=0)
    minQuantity = serializers.IntegerField(min_value=0, default=10)
    unitPrice = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, default=0)
    supplier = CleanCharField(required=False, allow_blank=True, max_length=255)
    expiryDate = serializers.DateField(required=False, allow_null=True)
    batchNumber = CleanCharField(required=False, allow_blank=True, max_length=64)
    description = CleanCharField(required=False, allow_blank=True)


class StockUpdateSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1)
    operation = serializers.CharField()
