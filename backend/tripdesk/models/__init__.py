from tripdesk.models.profile import Profile
from tripdesk.models.catalog import Tag, ServiceType, LocationTag
from tripdesk.models.client import Client
from tripdesk.models.vendor import Vendor, VendorServiceType, VendorServiceTypeCommission, VendorTag
from tripdesk.models.booking import Booking, BookingStatus
from tripdesk.models.audit import AuditLog

__all__ = [
    "Profile",
    "Tag", "ServiceType", "LocationTag",
    "Client",
    "Vendor", "VendorServiceType", "VendorServiceTypeCommission", "VendorTag",
    "Booking", "BookingStatus",
    "AuditLog",
]
