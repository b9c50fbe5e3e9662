"""
Scheduling Domain

Weekly availability rules, slot resolution and the booked-slot view used
by the booking calendar.

Structure:
- availability.py  Pure slot generation (no database access)
- repository.py    Rule and booked-slot queries
- service.py       AvailabilityService
- router.py        /doctors/availability, /doctors/{id}/availability,
                   /doctors/{id}/slots, /doctors/{id}/bookable-dates
"""

from .router import router

__all__ = ["router"]
