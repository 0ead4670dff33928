"""조직 관련 SQLAlchemy ORM 모델 정의.

Organization-related SQLAlchemy ORM model definitions.
The organization is the tenant boundary: every CRM, project, onboarding,
email, billing and campaign row is scoped under one organization.

Tables:
    - organizations: 최상위 테넌트 (Top-level tenant)
"""

import re
import uuid
from datetime import datetime, timezone
from sqlalchemy import String, Boolean, DateTime, Integer, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


def slugify(name: str) -> str:
    """조직 이름을 URL용 슬러그로 변환합니다.

    Convert an organization name to a URL-safe slug
    (lowercase, alphanumerics and single dashes).
    """
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug or "org"


class Organization(Base):
    """조직(테넌트) 모델 — 시스템의 최상위 엔티티.

    Organization (tenant) model — Top-level entity in the system.
    All data is scoped under an organization for multi-tenant isolation.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        name: 조직 이름 (Organization name)
        slug: URL 슬러그 (Unique URL slug)
        plan: 요금제 등급 (Plan tier: free | pro | enterprise)
        status: 계정 상태 (Account status: active | trial | suspended | cancelled)
        max_users: 최대 활성 사용자 수 (Maximum active members)
        is_active: 활성 상태 (Active status flag)
        created_at: 생성 일시 UTC (Creation timestamp in UTC)
        updated_at: 수정 일시 UTC (Last update timestamp in UTC)

    Relationships:
        roles: 조직 내 역할 목록 (List of roles in this org, cascade delete)
        users: 조직 내 사용자 목록 (List of users in this org, cascade delete)
    """

    __tablename__ = "organizations"

    # 조직 고유 식별자 — Organization unique identifier (UUID v4, auto-generated)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 조직 이름 — Organization display name (max 255 chars, required)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # URL 슬러그 — Unique slug derived from the name
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    # 요금제 등급 — Plan tier (free | pro | enterprise)
    plan: Mapped[str] = mapped_column(String(20), nullable=False, default="free")
    # 계정 상태 — Account status (active | trial | suspended | cancelled)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="trial")
    # 최대 사용자 수 — Maximum active users allowed on this organization
    max_users: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    # 활성 상태 — Whether the organization is active (soft-delete pattern)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # 관계 — Relationships (cascade: 조직 삭제 시 하위 데이터 일괄 삭제)
    roles = relationship("Role", back_populates="organization", cascade="all, delete-orphan", passive_deletes=True)
    users = relationship("User", back_populates="organization", cascade="all, delete-orphan", passive_deletes=True)
