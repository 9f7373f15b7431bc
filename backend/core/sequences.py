# core/sequences.py
"""
Sequence allocation for human-readable document numbers.

Numbers are handed out by one UPDATE ... SET next_number = next_number + 1
per call. The row lock taken by that UPDATE serialises concurrent callers,
and each caller reads back the value inside its own transaction, so two
callers never receive the same number. Gaps are possible; duplicates are not.
"""

import logging

from django.db import transaction
from django.db.models import F

from core.models import Sequence
from core.write_barrier import command_writes_allowed

logger = logging.getLogger(__name__)


SEQUENCE_DEFAULTS = {
    "contact": ("CONT", 5),
    "product": ("PROD", 5),
    "purchase_order": ("PO", 5),
    "vendor_bill": ("BILL", 5),
    "sales_order": ("SO", 5),
    "invoice": ("INV", 5),
    "payment": ("PAY", 5),
    "analytical_account": ("AA", 4),
}

DEFAULT_PADDING = 5


def sequence_defaults(name: str) -> tuple[str, int]:
    """Prefix and padding for a sequence that does not exist yet."""
    if name in SEQUENCE_DEFAULTS:
        return SEQUENCE_DEFAULTS[name]
    return name.replace("_", "")[:4].upper(), DEFAULT_PADDING


def _get_or_create_sequence(name: str) -> Sequence:
    prefix, padding = sequence_defaults(name)
    seq, created = Sequence.objects.get_or_create(
        name=name,
        defaults={"prefix": prefix, "padding": padding, "next_number": 1},
    )
    if created:
        logger.info(
            f"Sequence '{name}' created with prefix {prefix}",
            extra={"sequence": name},
        )
    return seq


def next_sequence_number(name: str) -> tuple[int, Sequence]:
    """
    Reserve the next number of a sequence.

    Returns (number, sequence) where sequence carries the prefix/padding
    that were current at allocation time.
    """
    if not name:
        raise ValueError("Sequence name is required.")

    with transaction.atomic(), command_writes_allowed():
        seq = _get_or_create_sequence(name)
        Sequence.objects.filter(pk=seq.pk).update(next_number=F("next_number") + 1)
        seq.refresh_from_db(fields=["next_number", "prefix", "padding"])
        return seq.next_number - 1, seq


def next_sequence_value(name: str) -> str:
    """
    Allocate the next formatted identifier, e.g. next_sequence_value("invoice")
    -> "INV-00001".
    """
    number, seq = next_sequence_number(name)
    return seq.format(number)


def configure_sequence(name: str, prefix: str | None = None, padding: int | None = None) -> Sequence:
    """Change prefix/padding of a sequence without touching its counter."""
    fields = {}
    if prefix is not None:
        if not prefix.strip():
            raise ValueError("Prefix cannot be blank.")
        fields["prefix"] = prefix.strip().upper()
    if padding is not None:
        if padding < 1:
            raise ValueError("Padding must be at least 1.")
        fields["padding"] = padding

    with transaction.atomic(), command_writes_allowed():
        seq = _get_or_create_sequence(name)
        if fields:
            Sequence.objects.filter(pk=seq.pk).update(**fields)
            seq.refresh_from_db()
    return seq
