"""Initial migration

Revision ID: 001_initial
Revises:
Create Date: 2025-06-02 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create delivery_notes table
    op.create_table(
        'delivery_notes',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('vehicle_plate', sa.String(), nullable=False),
        sa.Column('driver_name', sa.String(), nullable=False),
        sa.Column('delivery_note_number', sa.String(), nullable=False),
        sa.Column('destination', sa.String(), nullable=False),
        sa.Column('po_number', sa.String(), nullable=True),
        sa.Column('net_weight', sa.Float(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='awaiting'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('has_seal', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('seal_numbers', sa.JSON(), nullable=False),
        sa.Column('company', sa.String(length=20), nullable=False, server_default='sbs'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('delivery_note_number')
    )
    op.create_index(op.f('ix_delivery_notes_id'), 'delivery_notes', ['id'], unique=False)
    op.create_index(op.f('ix_delivery_notes_delivery_note_number'), 'delivery_notes', ['delivery_note_number'], unique=True)
    op.create_index(op.f('ix_delivery_notes_po_number'), 'delivery_notes', ['po_number'], unique=False)
    op.create_index(op.f('ix_delivery_notes_status'), 'delivery_notes', ['status'], unique=False)
    op.create_index(op.f('ix_delivery_notes_updated_at'), 'delivery_notes', ['updated_at'], unique=False)

    # Create purchase_orders table
    op.create_table(
        'purchase_orders',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('po_number', sa.String(), nullable=False),
        sa.Column('po_date', sa.Date(), nullable=False),
        sa.Column('buyer_name', sa.String(), nullable=True),
        sa.Column('buyer_address', sa.String(), nullable=True),
        sa.Column('buyer_phone', sa.String(), nullable=True),
        sa.Column('buyer_email', sa.String(), nullable=True),
        sa.Column('product_type', sa.String(), nullable=False),
        sa.Column('total_tonnage', sa.Float(), nullable=False),
        sa.Column('price_per_ton', sa.Numeric(14, 2), nullable=False),
        sa.Column('total_value', sa.Numeric(16, 2), nullable=False),
        sa.Column('shipped_tonnage', sa.Float(), nullable=False, server_default='0'),
        sa.Column('remaining_tonnage', sa.Float(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='Active'),
        sa.Column('delivery_deadline', sa.Date(), nullable=True),
        sa.Column('payment_terms', sa.String(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('ppn_enabled', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('ppn_rate', sa.Float(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('po_number')
    )
    op.create_index(op.f('ix_purchase_orders_id'), 'purchase_orders', ['id'], unique=False)
    op.create_index(op.f('ix_purchase_orders_po_number'), 'purchase_orders', ['po_number'], unique=True)
    op.create_index(op.f('ix_purchase_orders_status'), 'purchase_orders', ['status'], unique=False)
    op.create_index(op.f('ix_purchase_orders_created_at'), 'purchase_orders', ['created_at'], unique=False)

    # Create users table
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('username', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('custom_menu_access', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username')
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
    op.create_index(op.f('ix_users_username'), 'users', ['username'], unique=True)


def downgrade() -> None:
    op.drop_index(op.f('ix_users_username'), table_name='users')
    op.drop_index(op.f('ix_users_id'), table_name='users')
    op.drop_table('users')
    op.drop_index(op.f('ix_purchase_orders_created_at'), table_name='purchase_orders')
    op.drop_index(op.f('ix_purchase_orders_status'), table_name='purchase_orders')
    op.drop_index(op.f('ix_purchase_orders_po_number'), table_name='purchase_orders')
    op.drop_index(op.f('ix_purchase_orders_id'), table_name='purchase_orders')
    op.drop_table('purchase_orders')
    op.drop_index(op.f('ix_delivery_notes_updated_at'), table_name='delivery_notes')
    op.drop_index(op.f('ix_delivery_notes_status'), table_name='delivery_notes')
    op.drop_index(op.f('ix_delivery_notes_po_number'), table_name='delivery_notes')
    op.drop_index(op.f('ix_delivery_notes_delivery_note_number'), table_name='delivery_notes')
    op.drop_index(op.f('ix_delivery_notes_id'), table_name='delivery_notes')
    op.drop_table('delivery_notes')
