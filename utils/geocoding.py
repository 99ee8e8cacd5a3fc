import requests
from flask import current_app


class AddressLookupError(Exception):
    pass


def _street_address(address: dict) -> str:
    house_number = address.get("house_number") or ""
    road = address.get("road") or ""
    if house_number and road:
        return f"{house_number}, {road}"
    return road or address.get("street") or ""


def parse_nominatim(payload):
    """Map a Nominatim reverse response onto address/city/province/region.

    Missing parts come back as empty strings; no address at all gives None.
    """
    if not isinstance(payload, dict) or not payload.get("address"):
        return None

    address = payload["address"]
    return {
        "address": _street_address(address),
        "city": (
            address.get("city")
            or address.get("town")
            or address.get("village")
            or address.get("municipality")
            or ""
        ),
        "province": address.get("county") or address.get("province") or "",
        "region": address.get("state") or address.get("region") or "",
    }


def reverse_geocode(lat: float, lng: float):
    params = {
        "format": "json",
        "lat": lat,
        "lon": lng,
        "addressdetails": 1,
        "accept-language": current_app.config.get("GEOCODER_LANGUAGE", "it"),
    }
    headers = {
        "Accept": "application/json",
        "User-Agent": current_app.config.get("GEOCODER_USER_AGENT", "VenueMap/1.0"),
    }
    try:
        resp = requests.get(
            current_app.config["GEOCODER_URL"],
            params=params,
            headers=headers,
            timeout=current_app.config.get("GEOCODER_TIMEOUT_SECONDS", 5),
        )
        resp.raise_for_status()
        payload = resp.json()
    except (requests.RequestException, ValueError) as exc:
        raise AddressLookupError(str(exc)) from exc

    return parse_nominatim(payload)
