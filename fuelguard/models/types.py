# fuelguard/models/types.py
"""Enumerations shared by models, schemas and services. Stored as plain strings."""

import enum
import uuid


def new_id() -> str:
    return str(uuid.uuid4())


class UserRole(str, enum.Enum):
    SUPER_ADMIN = "SUPER_ADMIN"
    STATION_MANAGER = "STATION_MANAGER"
    CITIZEN = "CITIZEN"


class VehicleType(str, enum.Enum):
    PRIVATE_CAR = "PRIVATE_CAR"
    TAXI = "TAXI"
    TRUCK = "TRUCK"
    MOTORCYCLE = "MOTORCYCLE"
    BUS = "BUS"
    GOVERNMENT = "GOVERNMENT"
    OTHER = "OTHER"


class FuelType(str, enum.Enum):
    ESSENCE = "ESSENCE"
    GASOIL = "GASOIL"
    GPL = "GPL"


class TransactionStatus(str, enum.Enum):
    APPROVED = "APPROVED"
    DENIED = "DENIED"


class ExchangeType(str, enum.Enum):
    NEW = "NEW"
    EXCHANGE = "EXCHANGE"


class BlacklistSeverity(str, enum.Enum):
    WARNING = "WARNING"
    BLOCKED = "BLOCKED"


class QREntityType(str, enum.Enum):
    VEHICLE = "VEHICLE"
    HOUSEHOLD = "HOUSEHOLD"

    @property
    def payload_type(self) -> str:
        """Lower-case tag used inside the QR payload."""
        return self.value.lower()


ALL_WILAYAS = "ALL"   # FuelRule.wilaya sentinel for the national default
