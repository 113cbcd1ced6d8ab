"""
Laundry Service Models
"""

from .resource import Resource, ResourceType
from .booking import Booking
from .waitlist import WaitlistEntry

__all__ = [
    'Resource',
    'ResourceType',
    'Booking',
    'WaitlistEntry',
]
