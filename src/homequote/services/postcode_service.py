"""
UK postcode address lookup
"""
import re
from typing import Any, Dict, List, Optional

from homequote.external.postcode.client import PostcodeClient, clean_postcode
from homequote.utils.exceptions import BadRequestError, ExternalServiceError

STREET_NUMBER_RE = re.compile(r"^(\d+)\s+(.+)$")
SUB_BUILDING_MARKERS = ("ff", "flat", "unit")
COUNTRY = "United Kingdom"
NO_RESULTS = "No addresses found for this postcode."


def summary_to_address(summary: Dict[str, Any]) -> Dict[str, Any]:
    """Map one lookup summary to the address shape used by leads"""
    building_number = (summary.get("BuildingNumber") or "").strip()
    street_address = (summary.get("StreetAddress") or "").strip()
    building_name = None
    sub_building = None

    if summary.get("Type") == "residential":
        if any(marker in building_number.lower() for marker in SUB_BUILDING_MARKERS):
            sub_building = building_number
            address_line_1 = street_address
        else:
            address_line_1 = f"{building_number} {street_address}".strip()
    else:
        building_name = building_number or None
        address_line_1 = street_address

    match = STREET_NUMBER_RE.match(street_address)
    street_number = match.group(1) if match else None
    street_name = match.group(2) if match else street_address

    return {
        "address_line_1": address_line_1.strip(),
        "street_name": street_name or None,
        "street_number": street_number,
        "building_name": building_name,
        "sub_building": sub_building or None,
        "town_or_city": summary.get("Town"),
        "postcode": summary.get("Postcode"),
        "formatted_address": summary.get("Address"),
        "country": COUNTRY,
    }


def map_search_result(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Addresses with a first line and a town, in lookup order"""
    summaries = ((data or {}).get("SearchEnd") or {}).get("Summaries") or []
    addresses = [summary_to_address(s) for s in summaries]
    return [a for a in addresses if a["address_line_1"] and a["town_or_city"]]


async def lookup_postcode(postcode: Optional[str], client: Optional[PostcodeClient] = None) -> Dict[str, Any]:
    """
    Addresses for a UK postcode.

    Raises:
        BadRequestError: If no postcode is given, or nothing of it is left once cleaned
        ExternalServiceError: If the lookup service is unconfigured or fails
    """
    if not postcode or not clean_postcode(postcode):
        raise BadRequestError("Postcode is required")
    client = client or PostcodeClient()
    if not client.is_configured:
        raise ExternalServiceError("Postcode service is not available. Please try again later.")

    addresses = map_search_result(await client.search(postcode))
    if not addresses:
        return {"addresses": [], "success": False, "message": NO_RESULTS}
    return {"addresses": addresses, "success": True}
