from trippat.models.hotel import Hotel
from trippat.models.package import Package, PackageHotel
from trippat.models.supplier_hotel import SupplierHotelCache

__all__ = [
    "Hotel",
    "Package",
    "PackageHotel",
    "SupplierHotelCache",
]
