from django.db import models
from .constants import ZERO


# -----------------------------------------
# Shared queryset helpers
# -----------------------------------------
class ActiveQuerySet(models.QuerySet):
    def active(self):
        # only fetch records that are not deactivated
        return self.filter(is_active=True)


class ActiveManager(models.Manager.from_queryset(ActiveQuerySet)):
    # Enables query: Account.objects.active()
    pass


class JournalLineQuerySet(models.QuerySet):
    def posted(self, as_of=None):
        """Lines of posted journals, optionally up to and including `as_of`."""
        qs = self.filter(journal__status="posted")
        if as_of is not None:
            qs = qs.filter(journal__date__lte=as_of)
        return qs

    def totals(self):
        """Return (debit, credit) sums, 0 when there are no rows."""
        aggs = self.aggregate(
            total_debit=models.Sum("debit_amount"),
            total_credit=models.Sum("credit_amount"),
        )
        # Django returns None for an empty set → fallback to 0
        return aggs["total_debit"] or ZERO, aggs["total_credit"] or ZERO


class JournalLineManager(models.Manager.from_queryset(JournalLineQuerySet)):
    pass


class DocumentQuerySet(models.QuerySet):
    def outstanding(self):
        # pending or overdue purchase/sales documents
        return self.filter(status__in=["pending", "overdue"])

    def in_period(self, from_date, to_date):
        return self.filter(date__gte=from_date, date__lte=to_date)


class DocumentManager(models.Manager.from_queryset(DocumentQuerySet)):
    pass
