"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package ensures all models are registered with the
SQLAlchemy metadata, which is required for Alembic migrations and
relationship resolution.

Modules:
    organization: 조직 (Organization tenant)
    user: 역할, 사용자, 리프레시 토큰 (Role, User, RefreshToken)
    crm: 연락처, 파이프라인 단계, 딜, 활동 (Contacts, stages, deals, activities)
    project: 프로젝트, 작업, 메모 (Projects, tasks, notes)
    onboarding: 온보딩 세션, 응답, 리마인더 (Onboarding sessions, responses, reminders)
    email: 메일 계정, 스레드, 메시지, 스크리닝 (Mail accounts, threads, messages, screening)
    billing: 요금제, 구독, 사용 기록, 청구서 (Plans, subscriptions, usage, invoices)
    voice_campaign: 음성 캠페인 (Voice campaigns)
    notification: 알림 (User notifications)
"""

from app.models.organization import Organization
from app.models.user import Role, User, RefreshToken
from app.models.crm import Contact, DealStage, Deal, Activity
from app.models.project import Project, ProjectTask, ProjectNote
from app.models.onboarding import OnboardingSession, OnboardingResponse, OnboardingReminder
from app.models.email import EmailAccount, EmailThread, Email, ContactScreening, BlockedSender
from app.models.billing import BillingPlan, Subscription, UsageRecord, Invoice
from app.models.voice_campaign import VoiceCampaign
from app.models.notification import Notification

__all__ = [
    "Organization",
    "Role", "User", "RefreshToken",
    "Contact", "DealStage", "Deal", "Activity",
    "Project", "ProjectTask", "ProjectNote",
    "OnboardingSession", "OnboardingResponse", "OnboardingReminder",
    "EmailAccount", "EmailThread", "Email", "ContactScreening", "BlockedSender",
    "BillingPlan", "Subscription", "UsageRecord", "Invoice",
    "VoiceCampaign",
    "Notification",
]
