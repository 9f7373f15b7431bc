# core/admin.py
"""
Django admin for core models.

Sequences are command-owned: the admin shows counters but never edits
them. Use core.sequences.configure_sequence() to change prefix/padding.
"""

from django.contrib import admin

from .models import Sequence


class ReadOnlyModelAdmin(admin.ModelAdmin):
    """
    Base admin class for command-owned models.

    Direct admin edits would bypass validation and the atomic state
    updates done by the command layer.
    """

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def changeform_view(self, request, object_id=None, form_url="", extra_context=None):
        extra_context = extra_context or {}
        extra_context["show_save"] = False
        extra_context["show_save_and_continue"] = False
        extra_context["show_save_and_add_another"] = False
        extra_context["readonly_message"] = (
            "This record is managed by the command layer. Use the API to make changes."
        )
        return super().changeform_view(request, object_id, form_url, extra_context)


@admin.register(Sequence)
class SequenceAdmin(ReadOnlyModelAdmin):
    list_display = ["name", "prefix", "padding", "next_number", "updated_at"]
    search_fields = ["name", "prefix"]
