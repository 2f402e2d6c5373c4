"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-09-01 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Users table
    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('role', sa.Enum('CLIENT', 'TRAINER', 'ADMIN', 'SYSTEM_ADMIN', name='userrole'), nullable=False, server_default='CLIENT'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    # Clients table
    op.create_table(
        'clients',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('first_name', sa.String(), nullable=True),
        sa.Column('last_name', sa.String(), nullable=True),
        sa.Column('contact_info', postgresql.JSON(astext_type=sa.Text()), nullable=True),
        sa.Column('current', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('disabled', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_clients_user_id', 'clients', ['user_id'], unique=True)

    # Programme templates table
    op.create_table(
        'programme_templates',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('max_clients', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('sessions_description', postgresql.JSON(astext_type=sa.Text()), nullable=True),
        sa.Column('programme_cost', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('adhoc_data', postgresql.JSON(astext_type=sa.Text()), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )

    # Programmes table
    op.create_table(
        'programmes',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('programme_template_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('human_readable_id', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('max_clients', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('sessions_description', postgresql.JSON(astext_type=sa.Text()), nullable=True),
        sa.Column('programme_cost', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('adhoc_data', postgresql.JSON(astext_type=sa.Text()), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['programme_template_id'], ['programme_templates.id'], ondelete='SET NULL'),
    )
    op.create_index('ix_programmes_programme_template_id', 'programmes', ['programme_template_id'])
    op.create_index('ix_programmes_human_readable_id', 'programmes', ['human_readable_id'], unique=True)
    op.create_index('ix_programmes_start_date', 'programmes', ['start_date'])
    op.create_index('ix_programmes_end_date', 'programmes', ['end_date'])

    # Habits table
    op.create_table(
        'habits',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('frequency_per_week', postgresql.JSON(astext_type=sa.Text()), nullable=False),
        sa.Column('frequency_per_day', sa.Integer(), nullable=True),
        sa.Column('current', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )

    # Programme habits table
    op.create_table(
        'programme_habits',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('programme_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('habit_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('frequency_per_week', postgresql.JSON(astext_type=sa.Text()), nullable=True),
        sa.Column('frequency_per_day', sa.Integer(), nullable=True),
        sa.Column('mon_frequency', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('tue_frequency', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('wed_frequency', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('thu_frequency', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('fri_frequency', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('sat_frequency', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('sun_frequency', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('current', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['programme_id'], ['programmes.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['habit_id'], ['habits.id'], ),
        sa.CheckConstraint(
            'mon_frequency >= 0 AND tue_frequency >= 0 AND wed_frequency >= 0 AND thu_frequency >= 0 '
            'AND fri_frequency >= 0 AND sat_frequency >= 0 AND sun_frequency >= 0',
            name='ck_programme_habits_frequencies_non_negative'
        ),
    )
    op.create_index('ix_programme_habits_programme_id', 'programme_habits', ['programme_id'])
    op.create_index('ix_programme_habits_habit_id', 'programme_habits', ['habit_id'])

    # Programme enrolments table
    op.create_table(
        'programme_enrolments',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('programme_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('client_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('adhoc_data', postgresql.JSON(astext_type=sa.Text()), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['programme_id'], ['programmes.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('client_id', 'programme_id', name='uq_programme_enrolments_client_programme'),
    )
    op.create_index('ix_programme_enrolments_programme_id', 'programme_enrolments', ['programme_id'])
    op.create_index('ix_programme_enrolments_client_id', 'programme_enrolments', ['client_id'])

    # Client habits (completion records)
    op.create_table(
        'client_habits',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('programme_habit_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('client_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('habit_date', sa.Date(), nullable=False),
        sa.Column('times_done', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('completed', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['programme_habit_id'], ['programme_habits.id'], ),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('programme_habit_id', 'client_id', 'habit_date', name='uq_client_habits_habit_client_date'),
        sa.CheckConstraint('times_done >= 0 AND times_done <= 20', name='ck_client_habits_times_done_range'),
    )
    op.create_index('ix_client_habits_programme_habit_id', 'client_habits', ['programme_habit_id'])
    op.create_index('ix_client_habits_client_id', 'client_habits', ['client_id'])
    op.create_index('ix_client_habits_habit_date', 'client_habits', ['habit_date'])

    # OAuth tokens table
    op.create_table(
        'oauth_tokens',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('provider', sa.Enum('GMAIL', 'FITBIT', name='oauthprovider'), nullable=False),
        sa.Column('account_id', sa.String(), nullable=False),
        sa.Column('account_email', sa.String(), nullable=True),
        sa.Column('access_token', sa.String(), nullable=False),
        sa.Column('refresh_token', sa.String(), nullable=True),
        sa.Column('scope', sa.String(), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=True),
        sa.Column('connected_by_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['connected_by_id'], ['users.id'], ondelete='SET NULL'),
        sa.UniqueConstraint('provider', 'account_id', name='uq_oauth_tokens_provider_account'),
    )
    op.create_index('ix_oauth_tokens_provider', 'oauth_tokens', ['provider'])

    # Audit logs table
    op.create_table(
        'audit_logs',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('event_type', sa.Enum(
            'OAUTH_CONNECTED', 'OAUTH_DISCONNECTED', 'TOKEN_REFRESHED', 'TOKEN_DECRYPTED',
            'RATE_LIMIT_EXCEEDED', 'UNAUTHORIZED_ACCESS', name='auditeventtype'
        ), nullable=False),
        sa.Column('resource_type', sa.String(), nullable=True),
        sa.Column('resource_id', sa.String(), nullable=True),
        sa.Column('ip_address', sa.String(), nullable=True),
        sa.Column('user_agent', sa.String(), nullable=True),
        sa.Column('details', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='SET NULL'),
    )
    op.create_index('ix_audit_logs_user_id', 'audit_logs', ['user_id'])
    op.create_index('ix_audit_logs_event_type', 'audit_logs', ['event_type'])
    op.create_index('ix_audit_logs_created_at', 'audit_logs', ['created_at'])


def downgrade() -> None:
    op.drop_table('audit_logs')
    op.drop_table('oauth_tokens')
    op.drop_table('client_habits')
    op.drop_table('programme_enrolments')
    op.drop_table('programme_habits')
    op.drop_table('habits')
    op.drop_table('programmes')
    op.drop_table('programme_templates')
    op.drop_table('clients')
    op.drop_table('users')
    op.execute('DROP TYPE IF EXISTS auditeventtype')
    op.execute('DROP TYPE IF EXISTS oauthprovider')
    op.execute('DROP TYPE IF EXISTS userrole')
