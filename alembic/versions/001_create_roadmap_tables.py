"""Create degree catalog and roadmap tables

Revision ID: 001
Revises:
Create Date: 2025-11-12 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '001'
down_revision = None
branch_labels = None
depends_on = None

SCHEMA = 'stud_hub_schema'


def upgrade() -> None:
    op.create_table('degree_templates',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('university', sa.String(length=255), nullable=False),
        sa.Column('degree_name', sa.String(length=255), nullable=False),
        sa.Column('total_credits', sa.Integer(), nullable=False),
        sa.Column('min_upper_credits', sa.Integer(), nullable=False),
        sa.Column('residency_credits', sa.Integer(), nullable=False),
        sa.Column('capstone_code', sa.String(length=64), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        schema=SCHEMA,
    )

    op.create_table('degree_requirements',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('template_id', sa.Uuid(), nullable=False),
        sa.Column('area_code', sa.String(length=64), nullable=False),
        sa.Column('area_name', sa.String(length=255), nullable=False),
        sa.Column('required_credits', sa.Integer(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['template_id'], [f'{SCHEMA}.degree_templates.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        schema=SCHEMA,
    )
    op.create_index(op.f('ix_degree_requirements_template_id'), 'degree_requirements', ['template_id'], schema=SCHEMA)

    op.create_table('requirement_mappings',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('requirement_id', sa.Uuid(), nullable=False),
        sa.Column('course_code_pattern', sa.String(length=255), nullable=True),
        sa.Column('title_keywords', sa.JSON(), nullable=True),
        sa.Column('provider_filter', sa.JSON(), nullable=True),
        sa.Column('fulfills_credits', sa.Integer(), nullable=False),
        sa.Column('level', sa.String(length=10), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['requirement_id'], [f'{SCHEMA}.degree_requirements.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        schema=SCHEMA,
    )
    op.create_index(op.f('ix_requirement_mappings_requirement_id'), 'requirement_mappings', ['requirement_id'], schema=SCHEMA)

    op.create_table('provider_catalog',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('provider', sa.String(length=100), nullable=False),
        sa.Column('course_code', sa.String(length=64), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('credits', sa.Integer(), nullable=False),
        sa.Column('level', sa.String(length=10), nullable=True),
        sa.Column('est_hours', sa.Integer(), nullable=False),
        sa.Column('price_est', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('url', sa.Text(), nullable=True),
        sa.Column('area_tags', sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        schema=SCHEMA,
    )
    op.create_index(op.f('ix_provider_catalog_provider'), 'provider_catalog', ['provider'], schema=SCHEMA)
    op.create_index(op.f('ix_provider_catalog_course_code'), 'provider_catalog', ['course_code'], schema=SCHEMA)

    op.create_table('roadmap_plans',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('template_id', sa.Uuid(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('total_remaining_credits', sa.Integer(), nullable=False),
        sa.Column('est_cost', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('est_months', sa.Integer(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['template_id'], [f'{SCHEMA}.degree_templates.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'template_id', name='uq_roadmap_plans_user_template'),
        sa.CheckConstraint("status IN ('draft', 'active', 'archived')", name='ck_roadmap_plans_status'),
        schema=SCHEMA,
    )
    op.create_index(op.f('ix_roadmap_plans_user_id'), 'roadmap_plans', ['user_id'], schema=SCHEMA)

    op.create_table('roadmap_steps',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('plan_id', sa.Uuid(), nullable=False),
        sa.Column('step_index', sa.Integer(), nullable=False),
        sa.Column('item_type', sa.String(length=32), nullable=False),
        sa.Column('ref_code', sa.String(length=64), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('credits', sa.Integer(), nullable=False),
        sa.Column('est_cost', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('est_weeks', sa.Integer(), nullable=False),
        sa.CheckConstraint('step_index > 0', name='ck_roadmap_steps_index_positive'),
        sa.CheckConstraint("item_type IN ('provider_course', 'in_residence_session')", name='ck_roadmap_steps_item_type'),
        sa.ForeignKeyConstraint(['plan_id'], [f'{SCHEMA}.roadmap_plans.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('plan_id', 'step_index', name='uq_roadmap_steps_plan_index'),
        schema=SCHEMA,
    )
    op.create_index(op.f('ix_roadmap_steps_plan_id'), 'roadmap_steps', ['plan_id'], schema=SCHEMA)

    op.create_table('plan_financials',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('plan_id', sa.Uuid(), nullable=False),
        sa.Column('pace_months', sa.Integer(), nullable=False),
        sa.Column('sessions_actual', sa.Integer(), nullable=False),
        sa.Column('phase1_cost', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('session_cost', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('program_fee', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('projected_total', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('over_budget', sa.Boolean(), nullable=False),
        sa.Column('overage_reasons', sa.JSON(), nullable=True),
        sa.Column('payment_method', sa.String(length=20), nullable=False),
        sa.Column('upfront_due', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('monthly_payment', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('completion_target', sa.Date(), nullable=True),
        sa.Column('monthly_schedule', sa.JSON(), nullable=True),
        sa.ForeignKeyConstraint(['plan_id'], [f'{SCHEMA}.roadmap_plans.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('plan_id'),
        schema=SCHEMA,
    )


def downgrade() -> None:
    op.drop_table('plan_financials', schema=SCHEMA)
    op.drop_index(op.f('ix_roadmap_steps_plan_id'), table_name='roadmap_steps', schema=SCHEMA)
    op.drop_table('roadmap_steps', schema=SCHEMA)
    op.drop_index(op.f('ix_roadmap_plans_user_id'), table_name='roadmap_plans', schema=SCHEMA)
    op.drop_table('roadmap_plans', schema=SCHEMA)
    op.drop_index(op.f('ix_provider_catalog_course_code'), table_name='provider_catalog', schema=SCHEMA)
    op.drop_index(op.f('ix_provider_catalog_provider'), table_name='provider_catalog', schema=SCHEMA)
    op.drop_table('provider_catalog', schema=SCHEMA)
    op.drop_index(op.f('ix_requirement_mappings_requirement_id'), table_name='requirement_mappings', schema=SCHEMA)
    op.drop_table('requirement_mappings', schema=SCHEMA)
    op.drop_index(op.f('ix_degree_requirements_template_id'), table_name='degree_requirements', schema=SCHEMA)
    op.drop_table('degree_requirements', schema=SCHEMA)
    op.drop_table('degree_templates', schema=SCHEMA)
