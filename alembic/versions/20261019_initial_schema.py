"""Initial schema: users, contexts, commands, tasks

Revision ID: 3f1a7c2e9b40
Revises:
Create Date: 2026-10-19

Commands and tasks share the work item columns. Tasks additionally link to
a Google Calendar event and optionally to the user that owns the calendar.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from commandstack.models.base import GUID, UTCDateTime


# revision identifiers, used by Alembic.
revision: str = '3f1a7c2e9b40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

WORK_STATUS = sa.Enum(
    'PENDING', 'EXECUTING', 'EXIT_SUCCESS', 'SIGKILL',
    name='workstatus', native_enum=False, length=20,
)
WORK_TYPE = sa.Enum('TASK', 'SCHEDULE', name='worktype', native_enum=False, length=20)


def _work_item_columns() -> list:
    return [
        sa.Column('syntax', sa.String(length=500), nullable=False),
        sa.Column('details', sa.Text(), nullable=True),
        sa.Column('status', WORK_STATUS, nullable=False),
        sa.Column('type', WORK_TYPE, nullable=False),
        sa.Column('context_id', GUID(), sa.ForeignKey('contexts.id'), nullable=False),
        sa.Column('deadline', UTCDateTime(), nullable=True),
        sa.Column('started_at', UTCDateTime(), nullable=True),
        sa.Column('completed_at', UTCDateTime(), nullable=True),
    ]


def _base_columns() -> list:
    return [
        sa.Column('id', GUID(), nullable=False),
        sa.Column('created_at', UTCDateTime(), nullable=False),
        sa.Column('updated_at', UTCDateTime(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table('users',
        sa.Column('google_id', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('picture_url', sa.String(length=1024), nullable=True),
        sa.Column('access_token', sa.Text(), nullable=True),
        sa.Column('refresh_token', sa.Text(), nullable=True),
        sa.Column('token_expires_at', UTCDateTime(), nullable=True),
        *_base_columns(),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.create_index('ix_users_google_id', ['google_id'], unique=True)

    op.create_table('contexts',
        sa.Column('namespace', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('color', sa.String(length=7), nullable=True),
        *_base_columns(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('namespace')
    )

    op.create_table('commands',
        *_work_item_columns(),
        *_base_columns(),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('commands', schema=None) as batch_op:
        batch_op.create_index('ix_commands_context_id', ['context_id'], unique=False)

    op.create_table('tasks',
        *_work_item_columns(),
        sa.Column('google_event_id', sa.String(length=1024), nullable=True),
        sa.Column('sync_to_google', sa.Boolean(), nullable=False),
        sa.Column('user_id', GUID(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_base_columns(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('google_event_id')
    )
    with op.batch_alter_table('tasks', schema=None) as batch_op:
        batch_op.create_index('ix_tasks_context_id', ['context_id'], unique=False)
        batch_op.create_index('ix_tasks_user_id', ['user_id'], unique=False)


def downgrade() -> None:
    with op.batch_alter_table('tasks', schema=None) as batch_op:
        batch_op.drop_index('ix_tasks_user_id')
        batch_op.drop_index('ix_tasks_context_id')
    op.drop_table('tasks')

    with op.batch_alter_table('commands', schema=None) as batch_op:
        batch_op.drop_index('ix_commands_context_id')
    op.drop_table('commands')

    op.drop_table('contexts')

    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.drop_index('ix_users_google_id')
    op.drop_table('users')
