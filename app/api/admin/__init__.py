"""관리자 API 라우터 패키지 — 모든 대시보드 엔드포인트 통합.

Admin API Router package — Aggregates every authenticated dashboard
endpoint into a single router mounted at ``/api/v1/admin``.

Included routers (Workspace):
    - organizations: 내 조직 (My organization)
    - members: 멤버 및 역할 (Members and roles)
    - notifications: 인앱 알림 (In-app notifications)

Included routers (CRM):
    - contacts: 연락처 (Contacts)
    - deals: 파이프라인 단계 및 딜 (Deal stages and deals)
    - activities: 활동 기록 (Activities)
    - analytics: 매출/활동/파이프라인 지표 (Metrics)

Included routers (Delivery):
    - projects: 프로젝트, 작업, 메모 (Projects, tasks, notes)
    - onboarding: 클라이언트 온보딩 세션 (Client onboarding sessions)

Included routers (Inbox):
    - email: 메일 계정, 동기화, 메일함 (Mailboxes, sync, views)
    - screening: 발신자 스크리닝 (Sender screening)

Included routers (Voice):
    - voice_campaigns: 음성 캠페인 (Voice campaigns)
    - billing: 요금제, 구독, 사용량 (Plans, subscription, usage)
"""

from fastapi import APIRouter

# Workspace 라우터 임포트
from app.api.admin.organizations import router as organizations_router
from app.api.admin.members import router as members_router
from app.api.admin.notifications import router as notifications_router

# CRM 라우터 임포트
from app.api.admin.contacts import router as contacts_router
from app.api.admin.deals import router as deals_router
from app.api.admin.activities import router as activities_router
from app.api.admin.analytics import router as analytics_router

# Delivery 라우터 임포트
from app.api.admin.projects import router as projects_router
from app.api.admin.onboarding import router as onboarding_router

# Inbox 라우터 임포트
from app.api.admin.email import router as email_router
from app.api.admin.screening import router as screening_router

# Voice 라우터 임포트
from app.api.admin.voice_campaigns import router as voice_campaigns_router
from app.api.admin.billing import router as billing_router

admin_router: APIRouter = APIRouter()

# ---------------------------------------------------------------------------
# Workspace 라우터 등록
# ---------------------------------------------------------------------------
admin_router.include_router(organizations_router, prefix="/organization", tags=["Organization"])
# 멤버: /members, /roles (Members and roles share one module)
admin_router.include_router(members_router, tags=["Members"])
admin_router.include_router(notifications_router, prefix="/notifications", tags=["Notifications"])

# ---------------------------------------------------------------------------
# CRM 라우터 등록
# ---------------------------------------------------------------------------
admin_router.include_router(contacts_router, prefix="/contacts", tags=["Contacts"])
# 딜: /deal-stages, /deals
admin_router.include_router(deals_router, tags=["Deals"])
admin_router.include_router(activities_router, prefix="/activities", tags=["Activities"])
admin_router.include_router(analytics_router, prefix="/analytics", tags=["Analytics"])

# ---------------------------------------------------------------------------
# Delivery 라우터 등록
# ---------------------------------------------------------------------------
admin_router.include_router(projects_router, prefix="/projects", tags=["Projects"])
admin_router.include_router(onboarding_router, prefix="/onboarding", tags=["Onboarding"])

# ---------------------------------------------------------------------------
# Inbox 라우터 등록
# ---------------------------------------------------------------------------
admin_router.include_router(email_router, prefix="/email", tags=["Email"])
admin_router.include_router(screening_router, prefix="/email/screening", tags=["Screening"])

# ---------------------------------------------------------------------------
# Voice 라우터 등록
# ---------------------------------------------------------------------------
admin_router.include_router(voice_campaigns_router, prefix="/voice-campaigns", tags=["Voice Campaigns"])
admin_router.include_router(billing_router, prefix="/billing", tags=["Billing"])
