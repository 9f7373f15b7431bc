# tests/test_write_barrier.py
"""
Tests for write barrier enforcement on command-owned models.
"""

import pytest

from core.models import Sequence
from core.write_barrier import command_writes_allowed, in_command_write
from payments.commands import record_payment
from payments.models import Payment


@pytest.mark.django_db
def test_direct_sequence_save_raises(settings):
    settings.TESTING = False

    with pytest.raises(RuntimeError, match="Direct saves are only allowed"):
        Sequence.objects.create(name="barrier_test", prefix="BT")


@pytest.mark.django_db
def test_command_context_allows_writes(settings):
    settings.TESTING = False

    with command_writes_allowed():
        seq = Sequence.objects.create(name="barrier_test", prefix="BT")

    assert seq.format(1) == "BT-00001"


@pytest.mark.django_db
def test_direct_document_save_raises(settings, invoice):
    settings.TESTING = False

    invoice.notes = "edited outside a command"
    with pytest.raises(RuntimeError, match="command_writes_allowed"):
        invoice.save()


@pytest.mark.django_db
def test_commands_work_with_barrier_enabled(settings, actor, customer, invoice):
    """Commands open their own write context."""
    settings.TESTING = False

    result = record_payment(actor, "INCOMING", customer.pk, "100.00", document_id=invoice.pk)

    assert result.success, result.error
    invoice.refresh_from_db()
    assert invoice.paid_amount == 100


@pytest.mark.django_db
def test_payment_is_immutable(actor, customer, invoice):
    payment = record_payment(actor, "INCOMING", customer.pk, "50.00", document_id=invoice.pk).data

    payment.amount = 10
    with pytest.raises(RuntimeError, match="immutable"):
        payment.save()

    assert Payment.objects.get(pk=payment.pk).amount == 50


@pytest.mark.django_db
def test_nested_scopes_keep_writes_open(settings):
    settings.TESTING = False

    with command_writes_allowed():
        with command_writes_allowed():
            Sequence.objects.create(name="inner", prefix="IN")
        Sequence.objects.create(name="outer", prefix="OUT")

    assert not in_command_write()
    with pytest.raises(RuntimeError, match="command-owned"):
        Sequence.objects.create(name="after", prefix="AF")
