"""Initial hiring pipeline schema

Revision ID: 001_initial_pipeline_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_initial_pipeline_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    """
    Create the pipeline tables.

    Creates:
    1. opportunity and its ordered pipeline_stage rows
    2. application (one candidate in one pipeline)
    3. verification_receipt for replayed submissions
    4. reward_account / reward_credit for the points ledger
    """
    op.create_table(
        'opportunity',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('employer_name', sa.String(length=255), nullable=False),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'pipeline_stage',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('opportunity_id', sa.Uuid(), nullable=False),
        sa.Column('label', sa.String(length=100), nullable=False),
        sa.Column('kind', sa.String(length=20), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['opportunity_id'], ['opportunity.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('opportunity_id', 'position', name='uq_pipeline_stage_position'),
    )
    op.create_index('ix_pipeline_stage_opportunity_id', 'pipeline_stage', ['opportunity_id'])

    op.create_table(
        'application',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('opportunity_id', sa.Uuid(), nullable=False),
        sa.Column('status', sa.String(length=50), nullable=False),
        sa.Column('current_stage', sa.String(length=100), nullable=False),
        sa.Column('current_stage_id', sa.Uuid(), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['opportunity_id'], ['opportunity.id']),
        sa.ForeignKeyConstraint(['current_stage_id'], ['pipeline_stage.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_application_student_id', 'application', ['student_id'])
    op.create_index('ix_application_opportunity_id', 'application', ['opportunity_id'])

    op.create_table(
        'verification_receipt',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('submission_key', sa.String(length=64), nullable=False),
        sa.Column('application_id', sa.Uuid(), nullable=False),
        sa.Column('milestone', sa.String(length=100), nullable=False),
        sa.Column('accepted', sa.Boolean(), nullable=False),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('new_stage', sa.String(length=100), nullable=True),
        sa.Column('points_awarded', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['application_id'], ['application.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('submission_key'),
    )
    op.create_index('ix_verification_receipt_application_id', 'verification_receipt', ['application_id'])

    op.create_table(
        'reward_account',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('total_points', sa.Integer(), nullable=False),
        sa.Column('level', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('student_id'),
    )

    op.create_table(
        'reward_credit',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('points', sa.Integer(), nullable=False),
        sa.Column('application_id', sa.Uuid(), nullable=True),
        sa.Column('reason', sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['application_id'], ['application.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_reward_credit_student_id', 'reward_credit', ['student_id'])


def downgrade() -> None:
    """Drop the pipeline tables."""
    op.drop_index('ix_reward_credit_student_id', table_name='reward_credit')
    op.drop_table('reward_credit')
    op.drop_table('reward_account')
    op.drop_index('ix_verification_receipt_application_id', table_name='verification_receipt')
    op.drop_table('verification_receipt')
    op.drop_index('ix_application_opportunity_id', table_name='application')
    op.drop_index('ix_application_student_id', table_name='application')
    op.drop_table('application')
    op.drop_index('ix_pipeline_stage_opportunity_id', table_name='pipeline_stage')
    op.drop_table('pipeline_stage')
    op.drop_table('opportunity')
