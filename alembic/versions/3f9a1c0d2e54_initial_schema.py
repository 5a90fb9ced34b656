"""Initial schema: projects, dimensions, reports, metrics, thresholds, alerts

Revision ID: 3f9a1c0d2e54
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9a1c0d2e54'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


_DIMENSION_TABLES = ('branches', 'testbeds', 'benchmarks', 'measures')
_DIMENSION_CONSTRAINTS = {
    'branches': 'uq_branch_project_name',
    'testbeds': 'uq_testbed_project_name',
    'benchmarks': 'uq_benchmark_project_name',
    'measures': 'uq_measure_project_name',
}


def upgrade() -> None:
    op.create_table('projects',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('owner_id', sa.Text(), nullable=False),
        sa.Column('slug', sa.Text(), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('public', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('owner_id', 'slug', name='uq_project_owner_slug'),
    )

    # -- Dimension tables: unique (project_id, name) backs the resolver upsert --
    for table in _DIMENSION_TABLES:
        columns = [
            sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
            sa.Column('project_id', sa.Integer(), sa.ForeignKey('projects.id'), nullable=False),
            sa.Column('name', sa.Text(), nullable=False),
        ]
        if table == 'measures':
            columns.append(sa.Column('units', sa.Text(), nullable=True))
        columns.append(
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True)
        )
        op.create_table(table,
            *columns,
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('project_id', 'name', name=_DIMENSION_CONSTRAINTS[table]),
        )

    op.create_table('reports',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('project_id', sa.Integer(), sa.ForeignKey('projects.id'), nullable=False),
        sa.Column('branch_id', sa.Integer(), sa.ForeignKey('branches.id'), nullable=False),
        sa.Column('testbed_id', sa.Integer(), sa.ForeignKey('testbeds.id'), nullable=False),
        sa.Column('git_hash', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_reports_coordinate', 'reports',
                    ['project_id', 'branch_id', 'testbed_id', 'created_at'])

    op.create_table('metrics',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('report_id', sa.Integer(), sa.ForeignKey('reports.id'), nullable=False),
        sa.Column('benchmark_id', sa.Integer(), sa.ForeignKey('benchmarks.id'), nullable=False),
        sa.Column('measure_id', sa.Integer(), sa.ForeignKey('measures.id'), nullable=False),
        sa.Column('value', sa.Float(), nullable=False),
        sa.Column('lower_value', sa.Float(), nullable=True),
        sa.Column('upper_value', sa.Float(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_metrics_report_id', 'metrics', ['report_id'])
    op.create_index('ix_metrics_benchmark_measure', 'metrics', ['benchmark_id', 'measure_id'])

    op.create_table('thresholds',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('project_id', sa.Integer(), sa.ForeignKey('projects.id'), nullable=False),
        sa.Column('branch_id', sa.Integer(), sa.ForeignKey('branches.id'), nullable=True),
        sa.Column('testbed_id', sa.Integer(), sa.ForeignKey('testbeds.id'), nullable=True),
        sa.Column('measure_id', sa.Integer(), sa.ForeignKey('measures.id'), nullable=False),
        sa.Column('upper_boundary', sa.Float(), nullable=True),
        sa.Column('lower_boundary', sa.Float(), nullable=True),
        sa.Column('min_sample_size', sa.Integer(), nullable=False, server_default='2'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_thresholds_project_id', 'thresholds', ['project_id'])

    op.create_table('alerts',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('threshold_id', sa.Integer(),
                  sa.ForeignKey('thresholds.id', ondelete='CASCADE'), nullable=False),
        sa.Column('metric_id', sa.Integer(), sa.ForeignKey('metrics.id'), nullable=False),
        sa.Column('baseline_value', sa.Float(), nullable=False),
        sa.Column('percent_change', sa.Float(), nullable=False),
        sa.Column('status', sa.Text(), nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_alerts_threshold_id', 'alerts', ['threshold_id'])
    op.create_index('ix_alerts_metric_id', 'alerts', ['metric_id'])


def downgrade() -> None:
    op.drop_index('ix_alerts_metric_id', 'alerts')
    op.drop_index('ix_alerts_threshold_id', 'alerts')
    op.drop_table('alerts')

    op.drop_index('ix_thresholds_project_id', 'thresholds')
    op.drop_table('thresholds')

    op.drop_index('ix_metrics_benchmark_measure', 'metrics')
    op.drop_index('ix_metrics_report_id', 'metrics')
    op.drop_table('metrics')

    op.drop_index('ix_reports_coordinate', 'reports')
    op.drop_table('reports')

    for table in reversed(_DIMENSION_TABLES):
        op.drop_table(table)

    op.drop_table('projects')
