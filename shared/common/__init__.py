# Shared Common Library for the hostel services.
# Authentication, permissions, error envelopes and request middleware
# used by every service.

__version__ = "1.0.0"
