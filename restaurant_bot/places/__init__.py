"""
Places gateway.

Responsibilities:
- Resolve a typed address into coordinates (Google Geocoding API).
- Search restaurants around a point and normalise them into ``Restaurant``.
- Fetch ``RestaurantDetails`` for one place on demand.
- Rank results deterministically by popularity before they reach the chat flow.
"""
