# Users and auth
from app.models.users.user_models import User, MagicLoginToken

# Catalog
from app.models.catalog.service_models import Service

# Intake and quotes
from app.models.requests.custom_request_models import CustomProjectRequest
from app.models.quotes.quote_models import Quote

# Orders and delivery
from app.models.orders.order_models import Order
from app.models.projects.project_models import Project, ProjectPhase, MilestonePayment

# Referrals
from app.models.referrals.referral_models import ReferralTracking

# Support
from app.models.support.audit_models import AuditLog
