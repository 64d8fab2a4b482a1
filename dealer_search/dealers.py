"""
Registry of supported dealership inventory sites.
Loaded once at import time and never mutated.
"""

from typing import Dict, List, Optional

from dealer_search.models import DealerConfig, DealerFlags


# Add new dealers here.
DEALERS = (
    DealerConfig(
        key="plano",
        display_name="Toyota of Plano",
        site_id="toyotaofplanogst",
        domain="https://www.toyotaofplano.com",
        page_id_new="toyotaofplanogst_SITEBUILDER_INVENTORY_SEARCH_RESULTS_AUTO_NEW_V1_1",
        page_id_used="toyotaofplanogst_SITEBUILDER_INVENTORY_SEARCH_RESULTS_AUTO_USED_V1_1",
        referer_new="https://www.toyotaofplano.com/new-inventory/index.htm",
        referer_used="https://www.toyotaofplano.com/used-inventory/index.htm",
    ),
    DealerConfig(
        key="dallas",
        display_name="Toyota of Dallas",
        site_id="toyotadallasvtg",
        domain="https://www.toyotaofdallas.com",
        page_id_new="toyotadallasvtg_SITEBUILDER_INVENTORY_SEARCH_RESULTS_AUTO_NEW_V1_1",
        page_id_used="toyotadallasvtg_SITEBUILDER_INVENTORY_SEARCH_RESULTS_AUTO_USED_V1_1",
        referer_new="https://www.toyotaofdallas.com/new-inventory/index.htm",
        referer_used="https://www.toyotaofdallas.com/used-inventory/index.htm",
        flags=DealerFlags(offset_shared_vehicle_image_by_one=True),
    ),
    DealerConfig(
        key="richardson",
        display_name="Toyota of Richardson",
        site_id="toyotarichardsonvtg",
        domain="https://www.toyotaofrichardson.com",
        page_id_new="toyotarichardsonvtg_SITEBUILDER_INVENTORY_SEARCH_RESULTS_AUTO_NEW_V1_2",
        page_id_used="toyotarichardsonvtg_SITEBUILDER_INVENTORY_SEARCH_RESULTS_AUTO_USED_V1_2",
        referer_new="https://www.toyotaofrichardson.com/new-inventory/index.htm",
        referer_used="https://www.toyotaofrichardson.com/used-inventory/index.htm",
        flags=DealerFlags(offset_shared_vehicle_image_by_one=True),
    ),
)

_DEALERS_BY_KEY: Dict[str, DealerConfig] = {dealer.key: dealer for dealer in DEALERS}


def list_dealers() -> List[DealerConfig]:
    return list(DEALERS)


def get_dealer(key: Optional[str]) -> Optional[DealerConfig]:
    """Look up a dealer by registry key; unknown or empty keys give None."""
    if not key:
        return None
    return _DEALERS_BY_KEY.get(key.lower())


def resolve_dealers(keys: Optional[List[str]] = None) -> List[DealerConfig]:
    """
    Resolve requested dealer keys against the registry.

    Args:
        keys: Requested dealer keys (unknown keys are skipped)

    Returns:
        The matching dealers, or every registered dealer when none resolve
    """
    resolved = []
    for key in keys or []:
        dealer = get_dealer(key)
        if dealer and dealer not in resolved:
            resolved.append(dealer)
    return resolved or list(DEALERS)
