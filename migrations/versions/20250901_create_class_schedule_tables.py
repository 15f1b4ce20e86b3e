"""
Create class_series and class_instance tables

Revision ID: 20250901_create_class_schedule_tables
Revises:
Create Date: 2025-09-01 10:00:00
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'a1c3e5f70921'
down_revision = None
branch_labels = None
depends_on = None

class_category = sa.Enum('CHILD', 'ADULT', 'ALL', name='classcategory')
class_type = sa.Enum('GROUP', 'INDIVIDUAL', name='classtype')
class_instance_status = sa.Enum('SCHEDULED', 'HELD', 'CANCELED', name='classinstancestatus')


def upgrade():
    op.create_table(
        'class_series',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=80), nullable=False),
        sa.Column('weekday', sa.Integer(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('category', class_category, nullable=False),
        sa.Column('class_type', class_type, nullable=False),
        sa.Column('instructor', sa.String(length=60), nullable=False),
        sa.Column('max_capacity', sa.Integer(), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('period_start', sa.Date(), nullable=False),
        sa.Column('period_end', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('weekday >= 0 AND weekday <= 6', name='check_series_valid_weekday'),
        sa.CheckConstraint('max_capacity > 0', name='check_series_positive_capacity'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_class_series_id'), 'class_series', ['id'], unique=False)
    op.create_index(op.f('ix_class_series_active'), 'class_series', ['active'], unique=False)

    op.create_table(
        'class_instance',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=80), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('instructor', sa.String(length=60), nullable=False),
        sa.Column('max_capacity', sa.Integer(), nullable=False),
        sa.Column('status', class_instance_status, nullable=False),
        sa.Column('category', class_category, nullable=False),
        sa.Column('class_type', class_type, nullable=False),
        sa.Column('series_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['series_id'], ['class_series.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('series_id', 'date', name='uq_class_instance_series_date')
    )
    op.create_index(op.f('ix_class_instance_id'), 'class_instance', ['id'], unique=False)
    op.create_index(op.f('ix_class_instance_date'), 'class_instance', ['date'], unique=False)
    op.create_index(op.f('ix_class_instance_series_id'), 'class_instance', ['series_id'], unique=False)


def downgrade():
    op.drop_index(op.f('ix_class_instance_series_id'), table_name='class_instance')
    op.drop_index(op.f('ix_class_instance_date'), table_name='class_instance')
    op.drop_index(op.f('ix_class_instance_id'), table_name='class_instance')
    op.drop_table('class_instance')
    op.drop_index(op.f('ix_class_series_active'), table_name='class_series')
    op.drop_index(op.f('ix_class_series_id'), table_name='class_series')
    op.drop_table('class_series')
    class_instance_status.drop(op.get_bind(), checkfirst=True)
    class_type.drop(op.get_bind(), checkfirst=True)
    class_category.drop(op.get_bind(), checkfirst=True)
