"""Supplier offer acceptance."""

from __future__ import annotations

import logging
from typing import List, Sequence

from scm_agent.models import SupplierOffer

logger = logging.getLogger(__name__)


class OfferAcceptancePolicy:
    """
    Pick which supplier offers to turn into purchase orders.

    Suppliers list partial offers before complete ones, and the platform
    honours only the first order placed against an offer. Walking the bundle
    backwards therefore commits the complete offer first. Offers with a zero
    quantity are price quotes and are skipped.
    """

    def select(self, offers: Sequence[SupplierOffer]) -> List[SupplierOffer]:
        accepted = [offer for offer in reversed(offers) if offer.is_orderable]
        logger.debug(
            "Accepted %d of %d supplier offers", len(accepted), len(offers)
        )
        return accepted
