from django.core.exceptions import ValidationError
from django.db.models.signals import pre_delete
from django.dispatch import receiver

from .models import LedgerEntry, Payment, PaymentAllocation

""" Block ledger entry deletion once any payment is allocated to it.
    Backs up services.entries.delete_entry for admin / queryset deletes. """


# pre_delete auto-fires just before Django deletes a model instance
@receiver(pre_delete, sender=LedgerEntry)
def prevent_delete_entry_with_allocations(sender, instance, **kwargs):
    if PaymentAllocation.objects.filter(entry=instance).exists():
        raise ValidationError(
            "Cannot delete entry with existing payment allocations.")


"""Block payment deletion once it has been allocated."""


@receiver(pre_delete, sender=Payment)
def prevent_delete_payment_with_allocations(sender, instance, **kwargs):
    if PaymentAllocation.objects.filter(payment=instance).exists():
        raise ValidationError(
            "Cannot delete payment with allocations. Remove allocations first.")
