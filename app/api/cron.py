"""크론 라우터 — 예약 배치 작업.

Cron Router — Batch jobs triggered by an external scheduler. Protected by
``Authorization: Bearer <CRON_SECRET>`` when the secret is configured.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import verify_cron_secret
from app.database import get_db
from app.schemas.billing import BillingCycleRunResponse
from app.schemas.onboarding import ReminderRunResponse
from app.services.billing_service import billing_service
from app.services.reminder_service import reminder_service

router: APIRouter = APIRouter(dependencies=[Depends(verify_cron_secret)])


@router.api_route("/send-reminders", methods=["GET", "POST"], response_model=ReminderRunResponse)
async def send_reminders(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ReminderRunResponse:
    """발송 시각이 지난 온보딩 리마인더를 발송합니다.

    Send every due onboarding reminder. GET is accepted for schedulers
    that can only issue GET requests.

    Returns:
        ReminderRunResponse: 처리/발송/건너뜀/실패 건수 (Run counters)
    """
    result: ReminderRunResponse = await reminder_service.process_due_reminders(db)
    await db.commit()
    return result


@router.post("/reset-billing-cycles", response_model=BillingCycleRunResponse)
async def reset_billing_cycles(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BillingCycleRunResponse:
    """만료된 구독 주기를 마감하고 청구서를 발행합니다."""
    result: BillingCycleRunResponse = await billing_service.process_billing_cycles(db)
    await db.commit()
    return result
