from flask import Blueprint, request, jsonify, current_app

from utils.geocoding import AddressLookupError, reverse_geocode

geocoding_bp = Blueprint("geocoding", __name__, url_prefix="/geocoding")


@geocoding_bp.get("/reverse")
def reverse():
    lat = request.args.get("lat", type=float)
    lng = request.args.get("lng", type=float)
    if lat is None or lng is None:
        return jsonify(error="Latitude and longitude are required"), 400

    try:
        result = reverse_geocode(lat, lng)
    except AddressLookupError as exc:
        current_app.logger.warning("Reverse geocoding failed for %s,%s: %s", lat, lng, exc)
        return jsonify(error="Failed to get address from coordinates"), 502

    return jsonify(result), 200
