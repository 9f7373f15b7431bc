from rest_framework import serializers

from .models import Sequence


class SequenceSerializer(serializers.ModelSerializer):
    preview = serializers.SerializerMethodField()

    class Meta:
        model = Sequence
        fields = ["id", "name", "prefix", "padding", "next_number", "preview", "updated_at"]
        read_only_fields = fields

    def get_preview(self, obj):
        return obj.format(obj.next_number)


class SequenceConfigureSerializer(serializers.Serializer):
    prefix = serializers.CharField(max_length=10, required=False)
    padding = serializers.IntegerField(min_value=1, max_value=12, required=False)
