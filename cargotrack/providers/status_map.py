"""
Status mapping - vendor status vocabularies to OrderStatus

Each provider owns one table. Lookups are case-insensitive and anything
unrecognized falls back to IN_TRANSIT, so a new vendor status never drops
an update.
"""

import logging
from typing import Any, Dict, Optional

from ..models import OrderStatus

logger = logging.getLogger(__name__)

DEFAULT_STATUS = OrderStatus.IN_TRANSIT


# AfterShip tags (tracking.tag and checkpoint.tag)
AFTERSHIP_STATUS_MAP: Dict[str, OrderStatus] = {
    "delivered": OrderStatus.DELIVERED,
    "out_for_delivery": OrderStatus.OUT_FOR_DELIVERY,
    "outfordelivery": OrderStatus.OUT_FOR_DELIVERY,
    "exception": OrderStatus.EXCEPTION,
    "expired": OrderStatus.EXCEPTION,
    "undelivered": OrderStatus.EXCEPTION,
    "failed_attempt": OrderStatus.EXCEPTION,
    "attemptfail": OrderStatus.EXCEPTION,
    "in_transit": OrderStatus.IN_TRANSIT,
    "intransit": OrderStatus.IN_TRANSIT,
    "info_received": OrderStatus.IN_TRANSIT,
    "inforeceived": OrderStatus.IN_TRANSIT,
    "pickup": OrderStatus.IN_TRANSIT,
    "available_for_pickup": OrderStatus.IN_TRANSIT,
    "availableforpickup": OrderStatus.IN_TRANSIT,
    "pending": OrderStatus.CREATED,
    "not_found": OrderStatus.CREATED,
    "notfound": OrderStatus.CREATED,
}

# 17TRACK latest_status.status / event stage values
TRACK17_STATUS_MAP: Dict[str, OrderStatus] = {
    "delivered": OrderStatus.DELIVERED,
    "outfordelivery": OrderStatus.OUT_FOR_DELIVERY,
    "exception": OrderStatus.EXCEPTION,
    "deliveryfailure": OrderStatus.EXCEPTION,
    "expired": OrderStatus.EXCEPTION,
    "returning": OrderStatus.EXCEPTION,
    "returned": OrderStatus.EXCEPTION,
    "intransit": OrderStatus.IN_TRANSIT,
    "inforeceived": OrderStatus.IN_TRANSIT,
    "pickedup": OrderStatus.IN_TRANSIT,
    "departure": OrderStatus.IN_TRANSIT,
    "arrival": OrderStatus.IN_TRANSIT,
    "availableforpickup": OrderStatus.IN_TRANSIT,
    "notfound": OrderStatus.CREATED,
    "pending": OrderStatus.CREATED,
}

# Correios SRO vocabulary as emitted by a relay that did not normalize
CORREIOS_STATUS_MAP: Dict[str, OrderStatus] = {
    "objeto_entregue": OrderStatus.DELIVERED,
    "objeto_saiu_para_entrega": OrderStatus.OUT_FOR_DELIVERY,
    "objeto_com_problema": OrderStatus.EXCEPTION,
    "objeto_nao_entregue": OrderStatus.EXCEPTION,
    "objeto_em_transito": OrderStatus.IN_TRANSIT,
    "objeto_aguardando_retirada": OrderStatus.IN_TRANSIT,
    "objeto_postado": OrderStatus.CREATED,
    "objeto_nao_encontrado": OrderStatus.CREATED,
}


def map_status(table: Dict[str, OrderStatus], vendor_status: Any) -> OrderStatus:
    """
    Translate a vendor status through a provider table.

    Args:
        table: Provider lookup table (lowercase keys)
        vendor_status: Raw status value from the vendor payload

    Returns:
        The mapped OrderStatus, or IN_TRANSIT when unrecognized
    """
    if not isinstance(vendor_status, str) or not vendor_status.strip():
        return DEFAULT_STATUS
    status = table.get(vendor_status.strip().lower())
    if status is None:
        logger.debug(f"Unrecognized vendor status '{vendor_status}', using {DEFAULT_STATUS.value}")
        return DEFAULT_STATUS
    return status


def parse_unified_status(value: Any, fallback: Optional[Dict[str, OrderStatus]] = None) -> OrderStatus:
    """Decode an already-normalized status, optionally trying a vendor table."""
    if isinstance(value, str):
        try:
            return OrderStatus(value.strip())
        except ValueError:
            pass
    if fallback is not None:
        return map_status(fallback, value)
    return DEFAULT_STATUS
