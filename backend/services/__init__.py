"""
Service layer.

*_service modules wrap the booking API endpoints; the other modules derive
dashboard views (membership status, reservation groups, analytics, cashbox)
from what those wrappers return.
"""
