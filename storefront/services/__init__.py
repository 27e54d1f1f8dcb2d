"""Business logic service layer."""

from storefront.services.audit import AuditQueryService, AuditRecorder  # noqa: F401
from storefront.services.authorization import AuthorizationGate  # noqa: F401
from storefront.services.identity import IdentityService  # noqa: F401
from storefront.services.maintenance import MaintenanceService  # noqa: F401
from storefront.services.products import ProductService  # noqa: F401
from storefront.services.users import UserService  # noqa: F401
