"""create users, households, memberships, categories and expenses

Revision ID: create_household_tables
Revises:
Create Date: 2026-10-18

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'create_household_tables'
down_revision = None
branch_labels = None
depends_on = None


def timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('auth_provider_id', sa.String(length=255), nullable=False),
        *timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_auth_provider_id', 'users', ['auth_provider_id'], unique=True)

    op.create_table(
        'households',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        *timestamps(),
    )

    op.create_table(
        'household_members',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('household_id', sa.Uuid(), sa.ForeignKey('households.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        *timestamps(),
        sa.UniqueConstraint('household_id', 'user_id', name='uq_household_members_household_user'),
    )
    op.create_index('ix_household_members_household_id', 'household_members', ['household_id'])
    op.create_index('ix_household_members_user_id', 'household_members', ['user_id'])

    op.create_table(
        'categories',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('household_id', sa.Uuid(), sa.ForeignKey('households.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.UniqueConstraint('household_id', 'name', name='uq_categories_household_name'),
    )
    op.create_index('ix_categories_household_id', 'categories', ['household_id'])

    op.create_table(
        'subcategories',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('household_id', sa.Uuid(), sa.ForeignKey('households.id', ondelete='CASCADE'), nullable=False),
        sa.Column('category_id', sa.Uuid(), sa.ForeignKey('categories.id'), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
    )
    op.create_index('ix_subcategories_household_id', 'subcategories', ['household_id'])
    op.create_index('ix_subcategories_category_id', 'subcategories', ['category_id'])

    op.create_table(
        'expenses',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('household_id', sa.Uuid(), sa.ForeignKey('households.id', ondelete='CASCADE'), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('category', sa.String(length=255), nullable=False),
        sa.Column('subcategory', sa.String(length=255), nullable=True),
        sa.Column('expense_datetime', sa.DateTime(timezone=True), nullable=False),
        *timestamps(),
    )
    op.create_index('ix_expenses_household_id', 'expenses', ['household_id'])
    op.create_index('ix_expenses_expense_datetime', 'expenses', ['expense_datetime'])


def downgrade():
    op.drop_table('expenses')
    op.drop_table('subcategories')
    op.drop_table('categories')
    op.drop_table('household_members')
    op.drop_table('households')
    op.drop_table('users')
