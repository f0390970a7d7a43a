import logging
from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task  # register this function as a Celery task
def refresh_party_balances(party_ids=None):
    """Recompute stored party balances from posted journal lines."""
    # import lazily to avoid circular imports at module import time
    from .models import PartyLedger
    from .services.ledger import refresh_party_balance

    parties = PartyLedger.objects.all()
    if party_ids:
        parties = parties.filter(pk__in=party_ids)

    count = 0
    for party in parties:
        refresh_party_balance(party)
        count += 1
    logger.info("Refreshed %s party balances", count)
    return count


@shared_task
def mark_overdue_purchases():
    """Flag pending credit purchases & sales past their due date."""
    from .services.documents import mark_overdue_documents

    return mark_overdue_documents()
