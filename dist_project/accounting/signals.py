from django.core.exceptions import ValidationError
from django.db.models.signals import pre_delete
from django.dispatch import receiver

from .models import PurchaseEntry, PurchaseReturn, SalesEntry, SalesReturn

""" Block deletion of paid documents & processed returns, whichever path tries to delete them
    (queryset.delete() skips the model's delete())."""


# pre_delete signal auto-fires just before Django deletes a model instance
@receiver(pre_delete, sender=PurchaseEntry)
@receiver(pre_delete, sender=SalesEntry)
def prevent_delete_paid_document(sender, instance, **kwargs):
    if instance.status == "paid":
        raise ValidationError(
            f"Cannot delete a paid {sender._meta.verbose_name}."
        )


@receiver(pre_delete, sender=PurchaseReturn)
@receiver(pre_delete, sender=SalesReturn)
def prevent_delete_processed_return(sender, instance, **kwargs):
    if instance.status == "processed":
        raise ValidationError(
            f"Cannot delete a processed {sender._meta.verbose_name}."
        )
