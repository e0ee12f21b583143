"""create_udin_tables

Revision ID: 3f9a1c2d7e10
Revises: 
Create Date: 2026-10-18 10:12:44.218031

"""
from alembic import op
import sqlalchemy as sa

revision = '3f9a1c2d7e10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'user',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('mobile', sa.String(length=15), nullable=False),
        sa.Column('address', sa.JSON(), nullable=True),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('is_email_verified', sa.Boolean(), nullable=False),
        sa.Column('role', sa.String(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        schema='udin'
    )
    op.create_index(op.f('ix_udin_user_id'), 'user', ['id'], unique=False, schema='udin')
    op.create_index(op.f('ix_udin_user_user_id'), 'user', ['user_id'], unique=True, schema='udin')
    op.create_index(op.f('ix_udin_user_email'), 'user', ['email'], unique=True, schema='udin')
    op.create_index(op.f('ix_udin_user_mobile'), 'user', ['mobile'], unique=True, schema='udin')

    op.create_table(
        'email_verification',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('otp', sa.String(length=6), nullable=False),
        sa.Column('verification_id', sa.String(length=32), nullable=False),
        sa.Column('expires_at', sa.BigInteger(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        schema='udin'
    )
    op.create_index(op.f('ix_udin_email_verification_id'), 'email_verification', ['id'], unique=False, schema='udin')
    op.create_index(op.f('ix_udin_email_verification_email'), 'email_verification', ['email'], unique=False, schema='udin')
    op.create_index(op.f('ix_udin_email_verification_verification_id'), 'email_verification', ['verification_id'], unique=True, schema='udin')

    op.create_table(
        'document_types',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('base_price', sa.Integer(), nullable=False),
        sa.Column('udin_required', sa.Boolean(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        schema='udin'
    )

    op.create_table(
        'payment',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('order_id', sa.String(), nullable=False),
        sa.Column('payment_id', sa.String(), nullable=True),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('breakdown', sa.JSON(), nullable=True),
        sa.Column('payment_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['udin.user.id'], ),
        sa.PrimaryKeyConstraint('id'),
        schema='udin'
    )
    op.create_index(op.f('ix_udin_payment_id'), 'payment', ['id'], unique=False, schema='udin')
    op.create_index(op.f('ix_udin_payment_user_id'), 'payment', ['user_id'], unique=False, schema='udin')
    op.create_index(op.f('ix_udin_payment_order_id'), 'payment', ['order_id'], unique=True, schema='udin')

    op.create_table(
        'documents',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('udin', sa.String(length=32), nullable=False),
        sa.Column('file_name', sa.String(length=255), nullable=False),
        sa.Column('original_name', sa.String(length=255), nullable=False),
        sa.Column('file_type', sa.String(length=20), nullable=False),
        sa.Column('file_size', sa.Integer(), nullable=False),
        sa.Column('file_path', sa.String(length=500), nullable=False),
        sa.Column('document_hash', sa.String(length=64), nullable=False),
        sa.Column('document_type_id', sa.String(), nullable=True),
        sa.Column('tier', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=30), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('s3_key', sa.String(length=500), nullable=True),
        sa.Column('s3_bucket', sa.String(length=100), nullable=True),
        sa.Column('payment_id', sa.String(), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('upload_date', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('verification_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['udin.user.id'], ),
        sa.ForeignKeyConstraint(['payment_id'], ['udin.payment.id'], ),
        sa.PrimaryKeyConstraint('id'),
        schema='udin'
    )
    op.create_index(op.f('ix_udin_documents_id'), 'documents', ['id'], unique=False, schema='udin')
    op.create_index(op.f('ix_udin_documents_user_id'), 'documents', ['user_id'], unique=False, schema='udin')
    op.create_index(op.f('ix_udin_documents_udin'), 'documents', ['udin'], unique=True, schema='udin')
    op.create_index(op.f('ix_udin_documents_document_hash'), 'documents', ['document_hash'], unique=True, schema='udin')
    op.create_index(op.f('ix_udin_documents_status'), 'documents', ['status'], unique=False, schema='udin')

    op.create_table(
        'activity_log',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=True),
        sa.Column('action', sa.String(), nullable=False),
        sa.Column('entity_type', sa.String(), nullable=False),
        sa.Column('entity_id', sa.String(), nullable=True),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('ip_address', sa.String(), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['udin.user.id'], ),
        sa.PrimaryKeyConstraint('id'),
        schema='udin'
    )
    op.create_index(op.f('ix_udin_activity_log_action'), 'activity_log', ['action'], unique=False, schema='udin')
    op.create_index(op.f('ix_udin_activity_log_entity_type'), 'activity_log', ['entity_type'], unique=False, schema='udin')
    op.create_index(op.f('ix_udin_activity_log_created_at'), 'activity_log', ['created_at'], unique=False, schema='udin')


def downgrade() -> None:
    op.drop_table('activity_log', schema='udin')
    op.drop_table('documents', schema='udin')
    op.drop_table('payment', schema='udin')
    op.drop_table('document_types', schema='udin')
    op.drop_table('email_verification', schema='udin')
    op.drop_table('user', schema='udin')
