"""클라이언트 API 라우터 패키지 — 공개 온보딩 포털.

Client API Router package — Public, token-addressed endpoints used by the
client onboarding portal. No user authentication; the access token in
the path is the credential.
"""

from fastapi import APIRouter

from app.api.client.onboarding import router as onboarding_router

client_router: APIRouter = APIRouter()

client_router.include_router(onboarding_router, prefix="/onboarding", tags=["Client Onboarding"])
