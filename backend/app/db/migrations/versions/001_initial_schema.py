"""
Initial schema: principals, permission catalog, plans, CRM tables

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


ENUMS = {
    'teammemberrole': ('admin', 'sales'),
    'paymentstatus': ('pending', 'paid', 'failed'),
    'stagetype': ('open', 'closePositive', 'closeNegative'),
    'meetingstatus': ('scheduled', 'complete', 'cancelled'),
    'meetingtype': ('person', 'on-call', 'virtual'),
    'actorkind': ('organization', 'team_member'),
}


def enum(name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def timestamps() -> list:
    return [
        sa.Column('created', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def tenant_columns() -> list:
    return [
        sa.Column('organization_id', sa.String(15), sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('status', sa.Integer, nullable=False, server_default='1', index=True),
        sa.Column('created_by', sa.String(15), nullable=False),
        sa.Column('updated_by', sa.String(15), nullable=False),
    ]


def upgrade() -> None:
    """Create all tables."""
    bind = op.get_bind()
    for name, values in ENUMS.items():
        postgresql.ENUM(*values, name=name).create(bind, checkfirst=True)

    # Principals
    op.create_table(
        'plans',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('price', sa.Numeric(12, 2), nullable=False, index=True),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('duration', sa.Integer, nullable=False, index=True),
        sa.Column('status', sa.Integer, nullable=False, server_default='1'),
        *timestamps(),
    )
    op.create_table(
        'organizations',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False, unique=True, index=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('pin_code', sa.String(10), nullable=True),
        sa.Column('address', sa.Text, nullable=True),
        sa.Column('status', sa.Integer, nullable=False, server_default='1', index=True),
        sa.Column('plan_id', sa.String(15), sa.ForeignKey('plans.id', ondelete='SET NULL'), nullable=True),
        sa.Column('plan_expire_date', sa.DateTime(timezone=True), nullable=True),
        *timestamps(),
    )
    op.create_table(
        'team_members',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('organization_id', sa.String(15), sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('full_name', sa.String(200), nullable=True),
        sa.Column('email', sa.String(255), nullable=True, index=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('domain_name', sa.String(255), nullable=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('role', enum('teammemberrole'), nullable=False, server_default='sales'),
        sa.Column('status', sa.Integer, nullable=False, server_default='1', index=True),
        *timestamps(),
        sa.UniqueConstraint('organization_id', 'name', name='uq_team_members_org_name'),
    )
    op.create_table(
        'super_admins',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('email', sa.String(255), nullable=False, unique=True, index=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('status', sa.Integer, nullable=False, server_default='1'),
        *timestamps(),
    )

    # Permission catalog
    op.create_table(
        'permissions',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False, unique=True, index=True),
        sa.Column('description', sa.Text, nullable=False, server_default=''),
        *timestamps(),
    )
    op.create_table(
        'team_member_permissions',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('team_member_id', sa.String(15), sa.ForeignKey('team_members.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('permission_id', sa.String(15), sa.ForeignKey('permissions.id', ondelete='CASCADE'), nullable=False, index=True),
        *timestamps(),
        sa.UniqueConstraint('team_member_id', 'permission_id', name='uq_team_member_permissions_member_permission'),
    )

    # Subscription and onboarding
    op.create_table(
        'payments',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('organization_id', sa.String(15), sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('plan_id', sa.String(15), sa.ForeignKey('plans.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('gateway_order_id', sa.String(100), nullable=False),
        sa.Column('gateway_payment_id', sa.String(100), nullable=False, unique=True),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('status', enum('paymentstatus'), nullable=False, server_default='pending'),
        *timestamps(),
    )
    op.create_table(
        'invite_tokens',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, index=True),
        sa.Column('token', sa.String(64), nullable=False, unique=True),
        sa.Column('role', enum('teammemberrole'), nullable=False, server_default='sales'),
        sa.Column('organization_id', sa.String(15), sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        *timestamps(),
    )
    op.create_table(
        'email_verifications',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True, index=True),
        sa.Column('otp_hash', sa.String(255), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('verified_at', sa.DateTime(timezone=True), nullable=True),
        *timestamps(),
    )

    # CRM
    op.create_table(
        'companies',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('website', sa.String(500), nullable=True),
        sa.Column('address', sa.Text, nullable=True),
        sa.Column('pincode', sa.String(20), nullable=True),
        sa.Column('gst_no', sa.String(50), nullable=True),
        sa.Column('owner_id', sa.String(15), sa.ForeignKey('team_members.id', ondelete='SET NULL'), nullable=True),
        *tenant_columns(),
        *timestamps(),
    )
    op.create_table(
        'contacts',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('email', sa.String(255), nullable=True, index=True),
        sa.Column('phone_numbers', sa.JSON, nullable=False),
        sa.Column('title', sa.String(200), nullable=True),
        sa.Column('address', sa.Text, nullable=True),
        sa.Column('pincode', sa.String(20), nullable=True),
        sa.Column('company_id', sa.String(15), sa.ForeignKey('companies.id', ondelete='SET NULL'), nullable=True),
        sa.Column('owner_id', sa.String(15), sa.ForeignKey('team_members.id', ondelete='SET NULL'), nullable=True),
        *tenant_columns(),
        *timestamps(),
    )
    op.create_table(
        'categories',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        *tenant_columns(),
        *timestamps(),
    )
    op.create_table(
        'products',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('code', sa.String(100), nullable=True),
        sa.Column('category_id', sa.String(15), sa.ForeignKey('categories.id', ondelete='SET NULL'), nullable=True),
        sa.Column('price', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('tax', sa.Numeric(5, 2), nullable=False, server_default='0'),
        sa.Column('commission_rate', sa.Numeric(5, 2), nullable=False, server_default='0'),
        sa.Column('stock_quantity', sa.Integer, nullable=False, server_default='0'),
        sa.Column('tentative_date', sa.Date, nullable=True),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('owner_id', sa.String(15), sa.ForeignKey('team_members.id', ondelete='SET NULL'), nullable=True),
        *tenant_columns(),
        *timestamps(),
    )
    op.create_table(
        'pipelines',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        *tenant_columns(),
        *timestamps(),
    )
    op.create_table(
        'stages',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('pipeline_id', sa.String(15), sa.ForeignKey('pipelines.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('serial_number', sa.Integer, nullable=False, server_default='0'),
        sa.Column('stage_type', enum('stagetype'), nullable=False, server_default='open'),
        *tenant_columns(),
        *timestamps(),
    )
    op.create_table(
        'meetings',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('title', sa.String(300), nullable=False),
        sa.Column('starts_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('ends_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('meeting_status', enum('meetingstatus'), nullable=False, server_default='scheduled'),
        sa.Column('meeting_type', enum('meetingtype'), nullable=False),
        sa.Column('location', sa.String(500), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('created_by_kind', enum('actorkind'), nullable=False),
        sa.Column('updated_by_kind', enum('actorkind'), nullable=False),
        *tenant_columns(),
        *timestamps(),
    )
    op.create_table(
        'leads',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False, index=True),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('pipeline_id', sa.String(15), sa.ForeignKey('pipelines.id', ondelete='RESTRICT'), nullable=False, index=True),
        sa.Column('stage_id', sa.String(15), sa.ForeignKey('stages.id', ondelete='RESTRICT'), nullable=False, index=True),
        sa.Column('assigned_to', sa.String(15), sa.ForeignKey('team_members.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('product_id', sa.String(15), sa.ForeignKey('products.id', ondelete='SET NULL'), nullable=True),
        sa.Column('company_id', sa.String(15), sa.ForeignKey('companies.id', ondelete='SET NULL'), nullable=True),
        sa.Column('contact_id', sa.String(15), sa.ForeignKey('contacts.id', ondelete='SET NULL'), nullable=True),
        sa.Column('meeting_id', sa.String(15), sa.ForeignKey('meetings.id', ondelete='SET NULL'), nullable=True),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('tax', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('discount', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('created_by_kind', enum('actorkind'), nullable=False),
        sa.Column('updated_by_kind', enum('actorkind'), nullable=False),
        *tenant_columns(),
        *timestamps(),
    )
    op.create_table(
        'notes',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('title', sa.String(300), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('module', sa.String(50), nullable=False),
        sa.Column('module_id', sa.String(15), nullable=False, index=True),
        *tenant_columns(),
        *timestamps(),
    )


def downgrade() -> None:
    """Drop all tables."""
    for table in (
        'notes', 'leads', 'meetings', 'stages', 'pipelines', 'products', 'categories',
        'contacts', 'companies', 'email_verifications', 'invite_tokens', 'payments',
        'team_member_permissions', 'permissions', 'super_admins', 'team_members',
        'organizations', 'plans',
    ):
        op.drop_table(table)

    # Drop enum types
    for name in ENUMS:
        op.execute(f'DROP TYPE IF EXISTS {name}')
