"""add_syllabus_tracking

Revision ID: 8b4e7d2c5a13
Revises: 3f1c2a9d7e01
Create Date: 2026-10-19 16:41:07.532118

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '8b4e7d2c5a13'
down_revision = '3f1c2a9d7e01'
branch_labels = None
depends_on = None


def _progress_status():
    return sa.Enum('NOT_STARTED', 'IN_PROGRESS', 'COMPLETED', name='progressstatus', native_enum=False, length=20)


def upgrade() -> None:
    op.create_table('syllabus_units',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('subject_id', sa.Integer(), nullable=False),
        sa.Column('unit_number', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('weightage', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.ForeignKeyConstraint(['subject_id'], ['subjects.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('subject_id', 'unit_number', name='uq_syllabus_unit_subject_number')
    )
    op.create_index(op.f('ix_syllabus_units_id'), 'syllabus_units', ['id'], unique=False)
    op.create_index(op.f('ix_syllabus_units_subject_id'), 'syllabus_units', ['subject_id'], unique=False)

    op.create_table('syllabus_topics',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('unit_id', sa.Integer(), nullable=False),
        sa.Column('topic_number', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('estimated_hours', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['unit_id'], ['syllabus_units.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('unit_id', 'topic_number', name='uq_syllabus_topic_unit_number')
    )
    op.create_index(op.f('ix_syllabus_topics_id'), 'syllabus_topics', ['id'], unique=False)
    op.create_index(op.f('ix_syllabus_topics_unit_id'), 'syllabus_topics', ['unit_id'], unique=False)

    op.create_table('syllabus_progress',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('faculty_id', sa.Integer(), nullable=False),
        sa.Column('batch_id', sa.Integer(), nullable=False),
        sa.Column('subject_id', sa.Integer(), nullable=False),
        sa.Column('unit_id', sa.Integer(), nullable=False),
        sa.Column('status', _progress_status(), nullable=False),
        sa.Column('completion_percent', sa.Integer(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('started_at', sa.DateTime(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.ForeignKeyConstraint(['batch_id'], ['batches.BatchId']),
        sa.ForeignKeyConstraint(['faculty_id'], ['users.id']),
        sa.ForeignKeyConstraint(['subject_id'], ['subjects.id']),
        sa.ForeignKeyConstraint(['unit_id'], ['syllabus_units.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('faculty_id', 'batch_id', 'subject_id', 'unit_id', name='uq_syllabus_progress')
    )
    op.create_index(op.f('ix_syllabus_progress_id'), 'syllabus_progress', ['id'], unique=False)
    op.create_index(op.f('ix_syllabus_progress_faculty_id'), 'syllabus_progress', ['faculty_id'], unique=False)
    op.create_index(op.f('ix_syllabus_progress_batch_id'), 'syllabus_progress', ['batch_id'], unique=False)

    op.create_table('syllabus_topic_progress',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('faculty_id', sa.Integer(), nullable=False),
        sa.Column('batch_id', sa.Integer(), nullable=False),
        sa.Column('topic_id', sa.Integer(), nullable=False),
        sa.Column('status', _progress_status(), nullable=False),
        sa.Column('taught_at', sa.DateTime(), nullable=True),
        sa.Column('session_id', sa.Integer(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.ForeignKeyConstraint(['batch_id'], ['batches.BatchId']),
        sa.ForeignKeyConstraint(['faculty_id'], ['users.id']),
        sa.ForeignKeyConstraint(['session_id'], ['attendance_sessions.id']),
        sa.ForeignKeyConstraint(['topic_id'], ['syllabus_topics.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('faculty_id', 'batch_id', 'topic_id', name='uq_syllabus_topic_progress')
    )
    op.create_index(op.f('ix_syllabus_topic_progress_id'), 'syllabus_topic_progress', ['id'], unique=False)
    op.create_index(op.f('ix_syllabus_topic_progress_faculty_id'), 'syllabus_topic_progress', ['faculty_id'], unique=False)
    op.create_index(op.f('ix_syllabus_topic_progress_batch_id'), 'syllabus_topic_progress', ['batch_id'], unique=False)


def downgrade() -> None:
    for table in ('syllabus_topic_progress', 'syllabus_progress', 'syllabus_topics', 'syllabus_units'):
        op.drop_table(table)
