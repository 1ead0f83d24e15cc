# FuelGuard — Database Models
# Import all models here for SQLAlchemy discovery

from fuelguard.models.user import User                                      # noqa
from fuelguard.models.station import Station                                # noqa
from fuelguard.models.vehicle import Vehicle                                # noqa
from fuelguard.models.household import Household                            # noqa
from fuelguard.models.quota_rule import FuelRule, GasBottleRule             # noqa
from fuelguard.models.qr_code import QRCode                                 # noqa
from fuelguard.models.blacklist import Blacklist                            # noqa
from fuelguard.models.transaction import FuelTransaction, GasBottleTransaction  # noqa
from fuelguard.models.audit_log import AuditLog                             # noqa
