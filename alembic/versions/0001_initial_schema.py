"""initial_schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-03-02 10:00:00.000000

전체 스키마 생성: 조직/사용자, CRM, 프로젝트, 온보딩, 이메일, 과금, 음성 캠페인, 알림.
Create the full schema: tenancy and users, CRM, projects, onboarding,
email, billing, voice campaigns and notifications.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID


# revision identifiers, used by Alembic.
revision: str = '0001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def _created_at() -> sa.Column:
    return sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now())


def _org_fk() -> sa.Column:
    return sa.Column(
        'organization_id', UUID(as_uuid=True),
        sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False,
    )


def upgrade() -> None:
    # --- 조직/사용자 (Tenancy and users) ---
    op.create_table(
        'organizations',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(255), nullable=False, unique=True),
        sa.Column('plan', sa.String(20), server_default='free', nullable=False),
        sa.Column('status', sa.String(20), server_default='trial', nullable=False),
        sa.Column('max_users', sa.Integer(), server_default='5', nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'roles',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        _org_fk(),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('level', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('organization_id', 'name', name='uq_role_org_name'),
        sa.UniqueConstraint('organization_id', 'level', name='uq_role_org_level'),
    )

    op.create_table(
        'users',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        _org_fk(),
        sa.Column('role_id', UUID(as_uuid=True), sa.ForeignKey('roles.id'), nullable=False),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('full_name', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'refresh_tokens',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('token', sa.String(512), nullable=False, unique=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        _created_at(),
    )
    op.create_index('ix_refresh_tokens_user_id', 'refresh_tokens', ['user_id'])

    # --- CRM ---
    op.create_table(
        'contacts',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        _org_fk(),
        sa.Column('owner_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('company', sa.String(255), nullable=True),
        sa.Column('job_title', sa.String(255), nullable=True),
        sa.Column('status', sa.String(20), server_default='lead', nullable=False),
        sa.Column('tags', JSONB(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_contacts_organization_id', 'contacts', ['organization_id'])

    op.create_table(
        'deal_stages',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        _org_fk(),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('order', sa.Integer(), server_default='0', nullable=False),
        sa.Column('color', sa.String(20), server_default='#6b7280', nullable=False),
        _created_at(),
        sa.UniqueConstraint('organization_id', 'name', name='uq_deal_stage_org_name'),
    )

    op.create_table(
        'deals',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        _org_fk(),
        sa.Column('owner_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('contact_id', UUID(as_uuid=True), sa.ForeignKey('contacts.id', ondelete='SET NULL'), nullable=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('value', sa.Numeric(12, 2), server_default='0', nullable=False),
        sa.Column('stage', sa.String(100), server_default='lead', nullable=False),
        sa.Column('probability', sa.Integer(), server_default='0', nullable=False),
        sa.Column('expected_close_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('actual_close_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_deals_organization_id', 'deals', ['organization_id'])

    op.create_table(
        'activities',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        _org_fk(),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('contact_id', UUID(as_uuid=True), sa.ForeignKey('contacts.id', ondelete='CASCADE'), nullable=True),
        sa.Column('deal_id', UUID(as_uuid=True), sa.ForeignKey('deals.id', ondelete='CASCADE'), nullable=True),
        sa.Column('type', sa.String(20), nullable=False),
        sa.Column('subject', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_activities_organization_id', 'activities', ['organization_id'])

    # --- 프로젝트 (Projects) ---
    op.create_table(
        'projects',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        _org_fk(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(20), server_default='planning', nullable=False),
        sa.Column('priority', sa.String(20), server_default='medium', nullable=False),
        sa.Column('budget', sa.Numeric(12, 2), nullable=True),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('assigned_to', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('contact_id', UUID(as_uuid=True), sa.ForeignKey('contacts.id', ondelete='SET NULL'), nullable=True),
        sa.Column('deal_id', UUID(as_uuid=True), sa.ForeignKey('deals.id', ondelete='SET NULL'), nullable=True),
        sa.Column('progress_percentage', sa.Integer(), nullable=True),
        sa.Column('auto_calculated_progress', sa.Integer(), server_default='0', nullable=False),
        sa.Column('created_by', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_projects_organization_id', 'projects', ['organization_id'])

    op.create_table(
        'project_tasks',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('project_id', UUID(as_uuid=True), sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(20), server_default='todo', nullable=False),
        sa.Column('priority', sa.String(20), server_default='medium', nullable=False),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('assigned_to', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('source_type', sa.String(30), server_default='manual', nullable=False),
        sa.Column('source_id', UUID(as_uuid=True), nullable=True),
        sa.Column('source_metadata', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_project_tasks_project_id', 'project_tasks', ['project_id'])
    op.create_index('ix_project_tasks_source_id', 'project_tasks', ['source_id'])

    op.create_table(
        'project_notes',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('project_id', UUID(as_uuid=True), sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False),
        sa.Column('author_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('extra', JSONB(), nullable=True),
        _created_at(),
    )
    op.create_index('ix_project_notes_project_id', 'project_notes', ['project_id'])

    # --- 온보딩 (Onboarding) ---
    op.create_table(
        'onboarding_sessions',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('project_id', UUID(as_uuid=True), sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False),
        _org_fk(),
        sa.Column('access_token', sa.String(64), nullable=False, unique=True),
        sa.Column('onboarding_type', sa.String(30), server_default='other', nullable=False),
        sa.Column('status', sa.String(20), server_default='pending', nullable=False),
        sa.Column('steps', JSONB(), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column('responses', JSONB(), server_default=sa.text("'{}'::jsonb"), nullable=False),
        sa.Column('current_step', sa.Integer(), server_default='0', nullable=False),
        sa.Column('completion_percentage', sa.Integer(), server_default='0', nullable=False),
        sa.Column('visible_steps', JSONB(), nullable=True),
        sa.Column('skipped_steps', JSONB(), nullable=True),
        sa.Column('client_email', sa.String(255), nullable=True),
        sa.Column('client_name', sa.String(255), nullable=True),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_activity_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reminder_schedule', sa.String(20), server_default='standard', nullable=False),
        sa.Column('reminder_enabled', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('reminder_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('last_reminder_sent_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('tasks_generated', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('tasks_generated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('task_count', sa.Integer(), server_default='0', nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_onboarding_sessions_project_id', 'onboarding_sessions', ['project_id'])
    op.create_index('ix_onboarding_sessions_organization_id', 'onboarding_sessions', ['organization_id'])

    op.create_table(
        'onboarding_responses',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('session_id', UUID(as_uuid=True), sa.ForeignKey('onboarding_sessions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('step_index', sa.Integer(), nullable=False),
        sa.Column('step_type', sa.String(20), server_default='form', nullable=False),
        sa.Column('response_data', JSONB(), nullable=True),
        sa.Column('time_spent', sa.Integer(), nullable=True),
        _created_at(),
    )
    op.create_index('ix_onboarding_responses_session_id', 'onboarding_responses', ['session_id'])

    # 리마인더 — metadata 컬럼은 ORM에서 extra로 매핑 (mapped as ``extra``)
    op.create_table(
        'onboarding_reminders',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('session_id', UUID(as_uuid=True), sa.ForeignKey('onboarding_sessions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('reminder_type', sa.String(20), nullable=False),
        sa.Column('scheduled_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', sa.String(20), server_default='pending', nullable=False),
        sa.Column('email_subject', sa.String(500), nullable=True),
        sa.Column('email_body', sa.Text(), nullable=True),
        sa.Column('sent_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('metadata', JSONB(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_onboarding_reminders_session_id', 'onboarding_reminders', ['session_id'])
    op.create_index('ix_onboarding_reminders_scheduled_at', 'onboarding_reminders', ['scheduled_at'])

    # --- 이메일 (Email) ---
    op.create_table(
        'email_accounts',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        _org_fk(),
        sa.Column('email_address', sa.String(255), nullable=False),
        sa.Column('provider', sa.String(20), server_default='nylas', nullable=False),
        sa.Column('nylas_grant_id', sa.String(255), nullable=True),
        sa.Column('status', sa.String(20), server_default='active', nullable=False),
        sa.Column('last_sync_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('sync_error', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_email_accounts_user_id', 'email_accounts', ['user_id'])

    op.create_table(
        'email_threads',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('account_id', UUID(as_uuid=True), sa.ForeignKey('email_accounts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('nylas_thread_id', sa.String(255), nullable=False),
        sa.Column('subject', sa.String(1000), nullable=True),
        sa.Column('snippet', sa.Text(), nullable=True),
        sa.Column('participants', JSONB(), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column('message_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('unread_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('first_message_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_message_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('importance_score', sa.Integer(), nullable=True),
        sa.Column('importance_reason', sa.String(500), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_email_threads_account_id', 'email_threads', ['account_id'])
    op.create_index('ix_email_threads_nylas_thread_id', 'email_threads', ['nylas_thread_id'])

    op.create_table(
        'emails',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('account_id', UUID(as_uuid=True), sa.ForeignKey('email_accounts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('thread_id', UUID(as_uuid=True), sa.ForeignKey('email_threads.id', ondelete='SET NULL'), nullable=True),
        sa.Column('message_id', sa.String(500), nullable=True),
        sa.Column('nylas_message_id', sa.String(255), nullable=False),
        sa.Column('from_address', JSONB(), server_default=sa.text("'{}'::jsonb"), nullable=False),
        sa.Column('to_addresses', JSONB(), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column('cc_addresses', JSONB(), nullable=True),
        sa.Column('subject', sa.String(1000), nullable=True),
        sa.Column('snippet', sa.Text(), nullable=True),
        sa.Column('body_text', sa.Text(), nullable=True),
        sa.Column('body_html', sa.Text(), nullable=True),
        sa.Column('received_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('is_read', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('is_starred', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('is_sent', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('is_draft', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('is_trash', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('is_archived', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('has_attachments', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('ai_category', sa.String(30), nullable=True),
        sa.Column('ai_category_confidence', sa.Integer(), nullable=True),
        sa.Column('hey_view', sa.String(20), nullable=True),
        sa.Column('hey_category', sa.String(30), nullable=True),
        sa.Column('hey_confidence', sa.Float(), nullable=True),
        sa.Column('screening_status', sa.String(20), server_default='pending', nullable=False),
        sa.Column('raw_headers', JSONB(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('account_id', 'nylas_message_id', name='uq_email_account_message'),
    )
    op.create_index('ix_emails_account_id', 'emails', ['account_id'])
    op.create_index('ix_emails_user_id', 'emails', ['user_id'])
    op.create_index('ix_emails_thread_id', 'emails', ['thread_id'])
    op.create_index('ix_emails_hey_view', 'emails', ['hey_view'])

    op.create_table(
        'contact_screenings',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('email_address', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('decision', sa.String(20), nullable=False),
        sa.Column('decided_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('notes', sa.Text(), nullable=True),
        _created_at(),
        sa.UniqueConstraint('user_id', 'email_address', name='uq_screening_user_email'),
    )

    op.create_table(
        'blocked_senders',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('email_address', sa.String(255), nullable=False),
        sa.Column('reason', sa.String(500), nullable=True),
        _created_at(),
        sa.UniqueConstraint('user_id', 'email_address', name='uq_blocked_user_email'),
    )

    # --- 과금 (Billing) — 금액은 센트 단위 정수 (integer cents) ---
    op.create_table(
        'billing_plans',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('slug', sa.String(50), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('monthly_price', sa.Integer(), server_default='0', nullable=False),
        sa.Column('included_minutes', sa.Integer(), server_default='0', nullable=False),
        sa.Column('overage_rate_per_minute', sa.Integer(), server_default='0', nullable=False),
        sa.Column('max_active_campaigns', sa.Integer(), server_default='1', nullable=False),
        sa.Column('max_users', sa.Integer(), server_default='1', nullable=False),
        sa.Column('features', JSONB(), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('display_order', sa.Integer(), server_default='0', nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'subscriptions',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        _org_fk(),
        sa.Column('plan_id', UUID(as_uuid=True), sa.ForeignKey('billing_plans.id'), nullable=False),
        sa.Column('payment_provider', sa.String(20), server_default='manual', nullable=False),
        sa.Column('external_customer_id', sa.String(255), nullable=True),
        sa.Column('external_subscription_id', sa.String(255), nullable=True),
        sa.Column('current_period_start', sa.DateTime(timezone=True), nullable=False),
        sa.Column('current_period_end', sa.DateTime(timezone=True), nullable=False),
        sa.Column('minutes_used_this_cycle', sa.Integer(), server_default='0', nullable=False),
        sa.Column('minutes_included_this_cycle', sa.Integer(), server_default='0', nullable=False),
        sa.Column('overage_minutes_this_cycle', sa.Integer(), server_default='0', nullable=False),
        sa.Column('overage_cost_this_cycle', sa.Integer(), server_default='0', nullable=False),
        sa.Column('status', sa.String(20), server_default='active', nullable=False),
        sa.Column('cancel_at_period_end', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('canceled_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_subscriptions_organization_id', 'subscriptions', ['organization_id'])
    op.create_index('ix_subscriptions_current_period_end', 'subscriptions', ['current_period_end'])

    # --- 음성 캠페인 (Voice campaigns) ---
    op.create_table(
        'voice_campaigns',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('project_id', UUID(as_uuid=True), sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False),
        _org_fk(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('campaign_type', sa.String(20), server_default='outbound', nullable=False),
        sa.Column('status', sa.String(20), server_default='draft', nullable=False),
        sa.Column('billing_type', sa.String(20), server_default='billable', nullable=False),
        sa.Column('provider', sa.String(20), server_default='vapi', nullable=False),
        sa.Column('provider_assistant_id', sa.String(255), nullable=True),
        sa.Column('phone_number', sa.String(50), nullable=True),
        sa.Column('setup_answers', JSONB(), nullable=True),
        sa.Column('schedule_config', JSONB(), nullable=True),
        sa.Column('campaign_goal', sa.Text(), nullable=True),
        sa.Column('agent_personality', sa.String(50), nullable=True),
        sa.Column('system_prompt', sa.Text(), nullable=True),
        sa.Column('first_message', sa.Text(), nullable=True),
        sa.Column('voicemail_message', sa.Text(), nullable=True),
        sa.Column('total_calls', sa.Integer(), server_default='0', nullable=False),
        sa.Column('completed_calls', sa.Integer(), server_default='0', nullable=False),
        sa.Column('failed_calls', sa.Integer(), server_default='0', nullable=False),
        sa.Column('average_call_duration', sa.Float(), server_default='0', nullable=False),
        sa.Column('average_call_quality', sa.Float(), nullable=True),
        sa.Column('rated_calls', sa.Integer(), server_default='0', nullable=False),
        sa.Column('total_cost', sa.Integer(), server_default='0', nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('last_call_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_voice_campaigns_project_id', 'voice_campaigns', ['project_id'])
    op.create_index('ix_voice_campaigns_organization_id', 'voice_campaigns', ['organization_id'])

    op.create_table(
        'usage_records',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        _org_fk(),
        sa.Column('subscription_id', UUID(as_uuid=True), sa.ForeignKey('subscriptions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('campaign_id', UUID(as_uuid=True), sa.ForeignKey('voice_campaigns.id', ondelete='SET NULL'), nullable=True),
        sa.Column('duration_in_seconds', sa.Integer(), nullable=False),
        sa.Column('minutes_used', sa.Integer(), nullable=False),
        sa.Column('cost_in_cents', sa.Integer(), server_default='0', nullable=False),
        sa.Column('was_overage', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('rate_per_minute', sa.Integer(), server_default='0', nullable=False),
        sa.Column('billing_period_start', sa.DateTime(timezone=True), nullable=False),
        sa.Column('billing_period_end', sa.DateTime(timezone=True), nullable=False),
        _created_at(),
    )
    op.create_index('ix_usage_records_organization_id', 'usage_records', ['organization_id'])

    op.create_table(
        'invoices',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        _org_fk(),
        sa.Column('subscription_id', UUID(as_uuid=True), sa.ForeignKey('subscriptions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('invoice_number', sa.String(100), nullable=False, unique=True),
        sa.Column('subscription_amount', sa.Integer(), server_default='0', nullable=False),
        sa.Column('usage_amount', sa.Integer(), server_default='0', nullable=False),
        sa.Column('subtotal', sa.Integer(), server_default='0', nullable=False),
        sa.Column('tax_amount', sa.Integer(), server_default='0', nullable=False),
        sa.Column('total_amount', sa.Integer(), server_default='0', nullable=False),
        sa.Column('minutes_included', sa.Integer(), server_default='0', nullable=False),
        sa.Column('minutes_used', sa.Integer(), server_default='0', nullable=False),
        sa.Column('overage_minutes', sa.Integer(), server_default='0', nullable=False),
        sa.Column('payment_provider', sa.String(20), server_default='manual', nullable=False),
        sa.Column('status', sa.String(20), server_default='draft', nullable=False),
        sa.Column('period_start', sa.DateTime(timezone=True), nullable=False),
        sa.Column('period_end', sa.DateTime(timezone=True), nullable=False),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        _created_at(),
    )
    op.create_index('ix_invoices_organization_id', 'invoices', ['organization_id'])

    # --- 알림 (Notifications) ---
    op.create_table(
        'notifications',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        _org_fk(),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('message', sa.String(1000), nullable=False),
        sa.Column('reference_type', sa.String(50), nullable=True),
        sa.Column('reference_id', UUID(as_uuid=True), nullable=True),
        sa.Column('is_read', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        _created_at(),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])


def downgrade() -> None:
    for table in (
        'notifications',
        'invoices',
        'usage_records',
        'voice_campaigns',
        'subscriptions',
        'billing_plans',
        'blocked_senders',
        'contact_screenings',
        'emails',
        'email_threads',
        'email_accounts',
        'onboarding_reminders',
        'onboarding_responses',
        'onboarding_sessions',
        'project_notes',
        'project_tasks',
        'projects',
        'activities',
        'deals',
        'deal_stages',
        'contacts',
        'refresh_tokens',
        'users',
        'roles',
        'organizations',
    ):
        op.drop_table(table)
