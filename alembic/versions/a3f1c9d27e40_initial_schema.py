"""initial schema

Revision ID: a3f1c9d27e40
Revises:
Create Date: 2026-10-19 09:12:44.318204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a3f1c9d27e40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # Check if tables already exist (for existing databases)
    conn = op.get_bind()
    inspector = sa.inspect(conn)
    existing_tables = inspector.get_table_names()

    if 'products' not in existing_tables:
        op.create_table('products',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(), nullable=False),
            sa.Column('price', sa.Float(), nullable=False),
            sa.Column('is_purchasable', sa.Boolean(), nullable=False),
            sa.Column('stock_status', sa.String(), nullable=False),
            sa.Column('stock_quantity', sa.Integer(), nullable=True),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_products_id'), 'products', ['id'], unique=False)

    if 'customers' not in existing_tables:
        op.create_table('customers',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('phone', sa.String(), nullable=False),
            sa.Column('username', sa.String(), nullable=False),
            sa.Column('email', sa.String(), nullable=False),
            sa.Column('role', sa.String(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('username')
        )
        op.create_index(op.f('ix_customers_id'), 'customers', ['id'], unique=False)
        op.create_index(op.f('ix_customers_phone'), 'customers', ['phone'], unique=True)
        op.create_index(op.f('ix_customers_email'), 'customers', ['email'], unique=True)

    if 'orders' not in existing_tables:
        op.create_table('orders',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('customer_id', sa.Integer(), nullable=False),
            sa.Column('status', sa.String(), nullable=False),
            sa.Column('billing_phone', sa.String(), nullable=False),
            sa.Column('total', sa.Float(), nullable=False),
            sa.Column('created_via', sa.String(), nullable=False),
            sa.Column('payment_method', sa.String(), nullable=True),
            sa.Column('payment_method_title', sa.String(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_orders_id'), 'orders', ['id'], unique=False)
        op.create_index(op.f('ix_orders_customer_id'), 'orders', ['customer_id'], unique=False)
        op.create_index(op.f('ix_orders_status'), 'orders', ['status'], unique=False)
        op.create_index(op.f('ix_orders_created_via'), 'orders', ['created_via'], unique=False)
        op.create_index(op.f('ix_orders_created_at'), 'orders', ['created_at'], unique=False)
        op.create_index('ix_orders_created_via_created_at', 'orders', ['created_via', 'created_at'], unique=False)

    if 'order_items' not in existing_tables:
        op.create_table('order_items',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('order_id', sa.Integer(), nullable=False),
            sa.Column('product_id', sa.Integer(), nullable=True),
            sa.Column('product_name', sa.String(), nullable=False),
            sa.Column('quantity', sa.Integer(), nullable=False),
            sa.Column('unit_price', sa.Float(), nullable=False),
            sa.Column('line_total', sa.Float(), nullable=False),
            sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ),
            sa.ForeignKeyConstraint(['product_id'], ['products.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_order_items_id'), 'order_items', ['id'], unique=False)
        op.create_index(op.f('ix_order_items_order_id'), 'order_items', ['order_id'], unique=False)
        op.create_index(op.f('ix_order_items_product_id'), 'order_items', ['product_id'], unique=False)

    if 'order_notes' not in existing_tables:
        op.create_table('order_notes',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('order_id', sa.Integer(), nullable=False),
            sa.Column('content', sa.Text(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_order_notes_id'), 'order_notes', ['id'], unique=False)
        op.create_index(op.f('ix_order_notes_order_id'), 'order_notes', ['order_id'], unique=False)

    if 'order_analytics' not in existing_tables:
        op.create_table('order_analytics',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('order_id', sa.Integer(), nullable=False),
            sa.Column('phone', sa.String(), nullable=False),
            sa.Column('product_id', sa.Integer(), nullable=False),
            sa.Column('user_agent', sa.String(), nullable=True),
            sa.Column('ip_address', sa.String(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('order_id')
        )
        op.create_index(op.f('ix_order_analytics_id'), 'order_analytics', ['id'], unique=False)
        op.create_index(op.f('ix_order_analytics_created_at'), 'order_analytics', ['created_at'], unique=False)

    if 'options' not in existing_tables:
        op.create_table('options',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(), nullable=False),
            sa.Column('value', sa.JSON(), nullable=True),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_options_id'), 'options', ['id'], unique=False)
        op.create_index(op.f('ix_options_name'), 'options', ['name'], unique=True)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('options')
    op.drop_table('order_analytics')
    op.drop_table('order_notes')
    op.drop_table('order_items')
    op.drop_table('orders')
    op.drop_table('customers')
    op.drop_table('products')
