"""initial schema: users and blocked_tokens

Revision ID: 001
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    bind = op.get_bind()
    is_sqlite = bind.dialect.name == 'sqlite'

    timestamp_default = sa.text("(datetime('now'))") if is_sqlite else sa.text('now()')

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('first_name', sa.String(length=50), nullable=False),
        sa.Column('last_name', sa.String(length=50), nullable=True),
        sa.Column('email_id', sa.String(length=255), nullable=False),
        sa.Column('age', sa.Integer(), nullable=True),
        sa.Column('password', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='user'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=timestamp_default),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=timestamp_default),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_user_id', 'users', ['user_id'], unique=True)
    # Emails are stored lower-cased, so this is the case-insensitive uniqueness guard
    op.create_index('ix_users_email_id', 'users', ['email_id'], unique=True)

    op.create_table(
        'blocked_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('key', sa.String(length=80), nullable=False),
        sa.Column('value', sa.String(length=20), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=timestamp_default),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_blocked_tokens_id', 'blocked_tokens', ['id'])
    # Checked on every authenticated request
    op.create_index('ix_blocked_tokens_key', 'blocked_tokens', ['key'], unique=True)
    # Sweep of expired rows (DELETE WHERE expires_at <= now())
    op.create_index('ix_blocked_tokens_expires_at', 'blocked_tokens', ['expires_at'])


def downgrade() -> None:
    op.drop_index('ix_blocked_tokens_expires_at', table_name='blocked_tokens')
    op.drop_index('ix_blocked_tokens_key', table_name='blocked_tokens')
    op.drop_index('ix_blocked_tokens_id', table_name='blocked_tokens')
    op.drop_table('blocked_tokens')
    op.drop_index('ix_users_email_id', table_name='users')
    op.drop_index('ix_users_user_id', table_name='users')
    op.drop_index('ix_users_id', table_name='users')
    op.drop_table('users')
