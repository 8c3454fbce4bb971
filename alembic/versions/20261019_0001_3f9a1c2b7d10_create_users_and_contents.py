"""create users and contents tables

Revision ID: 3f9a1c2b7d10
Revises:
Create Date: 2026-10-19

users:
  One credential record per end-user. email / phone / federated_id are unique
  when present (Postgres unique indexes ignore NULLs). Check constraints:
    - at least one of email, phone
    - local accounts carry a password hash
    - otp_hash / otp_expires_at / otp_channel are all set or all null

contents:
  Generated Gemini answers, owned by a user, deleted with the user.
"""
from alembic import op
import sqlalchemy as sa

revision = '3f9a1c2b7d10'
down_revision = None
branch_labels = None
depends_on = None

auth_mode = sa.Enum('local', 'federated', name='auth_mode')
otp_channel = sa.Enum('email', 'phone', name='otp_channel')


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True, nullable=False),
        sa.Column('name', sa.String(50), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('password_hash', sa.String(), nullable=True),
        sa.Column('federated_id', sa.String(255), nullable=True),
        sa.Column('auth_mode', auth_mode, nullable=False),
        sa.Column('avatar_url', sa.String(500), nullable=True),
        sa.Column('otp_hash', sa.String(), nullable=True),
        sa.Column('otp_expires_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('otp_channel', otp_channel, nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.CheckConstraint('email IS NOT NULL OR phone IS NOT NULL', name='ck_users_email_or_phone'),
        sa.CheckConstraint(
            "auth_mode <> 'local' OR password_hash IS NOT NULL",
            name='ck_users_local_has_password',
        ),
        sa.CheckConstraint(
            '(otp_hash IS NULL AND otp_expires_at IS NULL AND otp_channel IS NULL) OR '
            '(otp_hash IS NOT NULL AND otp_expires_at IS NOT NULL AND otp_channel IS NOT NULL)',
            name='ck_users_otp_all_or_nothing',
        ),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_phone', 'users', ['phone'], unique=True)
    op.create_index('ix_users_federated_id', 'users', ['federated_id'], unique=True)

    op.create_table(
        'contents',
        sa.Column('id', sa.Uuid(), primary_key=True, nullable=False),
        sa.Column('query', sa.Text(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column(
            'user_id',
            sa.Uuid(),
            sa.ForeignKey('users.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=False),
    )
    op.create_index('ix_contents_user_id', 'contents', ['user_id'])


def downgrade() -> None:
    op.drop_index('ix_contents_user_id', table_name='contents')
    op.drop_table('contents')
    op.drop_index('ix_users_federated_id', table_name='users')
    op.drop_index('ix_users_phone', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
    otp_channel.drop(op.get_bind(), checkfirst=True)
    auth_mode.drop(op.get_bind(), checkfirst=True)
