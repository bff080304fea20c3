"""
SQLAlchemy models for PipelineCRM.

- Principals: Organization, TeamMember, SuperAdmin
- Permission catalog: Permission, TeamMemberPermission
- Subscription: Plan, Payment
- Onboarding: EmailVerification, InviteToken
- CRM: Company, Contact, Category, Product, Pipeline, Stage, Meeting, Lead, Note
"""
from app.models.base import RecordStatus, ActorKind

# Principals
from app.models.organization import Organization
from app.models.team_member import TeamMember, TeamMemberRole
from app.models.super_admin import SuperAdmin

# Permission catalog
from app.models.permission import Permission, TeamMemberPermission

# Subscription
from app.models.plan import Plan, Payment, PaymentStatus

# Onboarding
from app.models.invite_token import InviteToken, EmailVerification

# CRM
from app.models.company import Company
from app.models.contact import Contact
from app.models.product import Category, Product
from app.models.pipeline import Pipeline, Stage, StageType
from app.models.meeting import Meeting, MeetingStatus, MeetingType
from app.models.lead import Lead
from app.models.note import Note

__all__ = [
    "RecordStatus",
    "ActorKind",
    "Organization",
    "TeamMember",
    "TeamMemberRole",
    "SuperAdmin",
    "Permission",
    "TeamMemberPermission",
    "Plan",
    "Payment",
    "PaymentStatus",
    "InviteToken",
    "EmailVerification",
    "Company",
    "Contact",
    "Category",
    "Product",
    "Pipeline",
    "Stage",
    "StageType",
    "Meeting",
    "MeetingStatus",
    "MeetingType",
    "Lead",
    "Note",
]
