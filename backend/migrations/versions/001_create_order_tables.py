"""Create product, order and order_item tables

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


ORDER_STATUSES = (
    'draft', 'pending', 'processing', 'shipped',
    'delivered', 'completed', 'cancelled', 'refunded',
)
PAYMENT_STATUSES = ('pending', 'paid', 'authorized', 'failed', 'refunded', 'cancelled')


def upgrade():
    # Create product table
    op.create_table(
        'product',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('sku', sa.Text(), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='0', comment='Stock level'),
        sa.Column('is_published', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('is_digital', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('NOW()')),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('NOW()')),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('quantity >= 0', name='ck_product_quantity_non_negative'),
    )
    op.create_index('ix_product_sku', 'product', ['sku'], unique=True)
    op.create_index('ix_product_published', 'product', ['is_published'])

    # Create order table
    order_status = postgresql.ENUM(*ORDER_STATUSES, name='order_status')
    payment_status = postgresql.ENUM(*PAYMENT_STATUSES, name='payment_status')

    op.create_table(
        'order',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('order_number', sa.Text(), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.Column('status', order_status, nullable=False, server_default='draft'),
        sa.Column('payment_status', payment_status, nullable=True),
        sa.Column('payment_method', sa.Text(), nullable=True),
        sa.Column('payment_details', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('shipping_method', sa.Text(), nullable=True),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('shipping_address', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('billing_address', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('metadata', postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default='{}'),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('NOW()')),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('NOW()')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('order_number', name='uq_order_order_number'),
    )
    op.create_index('ix_order_customer_status', 'order', ['customer_id', 'status'])
    op.create_index('ix_order_customer_created', 'order', ['customer_id', 'created_at'])

    # Create order_item table
    op.create_table(
        'order_item',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('sku', sa.Text(), nullable=True),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('subtotal', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('discount', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('tax', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('total', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('metadata', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('NOW()')),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('NOW()')),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['order_id'], ['order.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['product.id'], ondelete='RESTRICT'),
    )
    op.create_index('ix_order_item_order', 'order_item', ['order_id'])
    op.create_index('ix_order_item_product', 'order_item', ['product_id'])


def downgrade():
    op.drop_index('ix_order_item_product', table_name='order_item')
    op.drop_index('ix_order_item_order', table_name='order_item')
    op.drop_table('order_item')

    op.drop_index('ix_order_customer_created', table_name='order')
    op.drop_index('ix_order_customer_status', table_name='order')
    op.drop_table('order')

    op.execute('DROP TYPE IF EXISTS payment_status')
    op.execute('DROP TYPE IF EXISTS order_status')

    op.drop_index('ix_product_published', table_name='product')
    op.drop_index('ix_product_sku', table_name='product')
    op.drop_table('product')
