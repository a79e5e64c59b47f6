from django.core.validators import ProhibitNullCharactersValidator
from rest_framework import serializers
from rest_framework.validators import ProhibitSurrogateCharactersValidator

from .schema import CURRENT_SCHEMA_VERSION

_TEXT_CONTENT_VALIDATORS = (ProhibitNullCharactersValidator, ProhibitSurrogateCharactersValidator)


class VerbatimCharField(serializers.CharField):
    """CharField that keeps stored text exactly as written: blanks, padding and control characters."""

    def __init__(self, **kwargs):
        kwargs.setdefault("trim_whitespace", False)
        kwargs.setdefault("allow_blank", True)
        super().__init__(**kwargs)
        self.validators = [
            v for v in self.validators if not isinstance(v, _TEXT_CONTENT_VALIDATORS)
        ]


class VerbatimNumberField(serializers.Field):
    """Accepts any JSON number unchanged; the store keeps quantities and prices as given."""

    default_error_messages = {
        "invalid": "A number is required.",
    }

    def to_internal_value(self, data):
        if not isinstance(data, (int, float)):
            self.fail("invalid")
        return data

    def to_representation(self, value):
        return value


class CartLineItemSerializer(serializers.Serializer):
    id = VerbatimCharField()
    product_id = VerbatimCharField()
    product_name = VerbatimCharField()
    quantity = VerbatimNumberField()
    price_cents = VerbatimNumberField()
    variant_id = VerbatimCharField(required=False, allow_null=True)
    variant_options = serializers.DictField(
        child=VerbatimCharField(), required=False, allow_null=True
    )
    image_url = VerbatimCharField(required=False, allow_null=True)
    seller_id = VerbatimCharField(required=False, allow_null=True)


class CartDocumentSerializer(serializers.Serializer):
    version = serializers.IntegerField()
    revision = serializers.IntegerField(min_value=0, required=False, default=0)
    items = serializers.ListField(child=CartLineItemSerializer(), allow_empty=True)

    def validate_version(self, value):
        if value != CURRENT_SCHEMA_VERSION:
            raise serializers.ValidationError(
                f"Expected document version {CURRENT_SCHEMA_VERSION}, got {value}"
            )
        return value

    def validate_items(self, value):
        seen = set()
        duplicates = []
        for item in value:
            if item["id"] in seen:
                duplicates.append(item["id"])
            seen.add(item["id"])
        if duplicates:
            raise serializers.ValidationError(
                f"Duplicate line item ids: {', '.join(sorted(set(duplicates)))}"
            )
        return value
