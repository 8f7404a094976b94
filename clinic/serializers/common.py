import bleach
from rest_framework import serializers


def clean_text(v):
    return bleach.clean((v or '').strip(), strip=True)


class PageQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=200, default=10)


class CleanCharField(serializers.CharField):
    """CharField that strips HTML from the submitted text."""

    def to_internal_value(self, data):
        return clean_text(super().to_internal_value(data))
