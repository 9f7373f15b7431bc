# core/models.py
"""
Core models.

Sequence is the only model here: one named counter per human-readable
identifier family (CONT-00001, PO-00001, INV-00001, ...).
"""

from django.db import models

from core.write_barrier import guard_command_write


class Sequence(models.Model):
    """
    Named monotonic counter.

    next_number is the number the NEXT allocation will hand out.
    Only core.sequences mutates it, via a single conditional UPDATE.
    """

    name = models.CharField(max_length=50, unique=True)
    prefix = models.CharField(max_length=10)
    next_number = models.BigIntegerField(default=1)
    padding = models.PositiveSmallIntegerField(default=5)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def save(self, *args, **kwargs):
        guard_command_write("Sequence")
        super().save(*args, **kwargs)

    def format(self, number: int) -> str:
        return f"{self.prefix}-{str(number).zfill(self.padding)}"

    def __str__(self):
        return f"{self.name} ({self.prefix}, next {self.next_number})"
