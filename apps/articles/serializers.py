"""
Write panel serializers.

DraftStateSerializer validates the draft the edit form echoes back when the
user returns from the HTML or preview view.
"""

from rest_framework import serializers

from .workflow import form_fields

DRAFT_VERSION = 1


class DraftFieldsSerializer(serializers.Serializer):
    """
    Form field name -> string value.

    Unknown names and non-string values are rejected; the field list follows
    the active custom fields.
    """

    def to_internal_value(self, data):
        if not isinstance(data, dict):
            raise serializers.ValidationError("Draft fields must be an object.")

        known = set(form_fields())
        unknown = sorted(name for name in data if name not in known)
        if unknown:
            raise serializers.ValidationError(
                {name: "Unknown draft field." for name in unknown}
            )

        invalid = sorted(name for name, value in data.items() if not isinstance(value, str))
        if invalid:
            raise serializers.ValidationError(
                {name: "Draft values must be strings." for name in invalid}
            )

        return dict(data)

    def to_representation(self, instance):
        return dict(instance)


class DraftStateSerializer(serializers.Serializer):
    """Versioned envelope: {"v": 1, "fields": {...}}."""

    v = serializers.IntegerField()
    fields = DraftFieldsSerializer()

    def validate_v(self, value):
        if value != DRAFT_VERSION:
            raise serializers.ValidationError(f"Unsupported draft version {value}.")
        return value
