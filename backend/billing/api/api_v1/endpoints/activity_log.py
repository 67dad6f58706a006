"""Staff activity log API"""

from typing import Any, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func, and_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from billing.core.deps import get_db
from billing.models import StaffActivity
from billing.schemas.activity_log import ActivityListResponse, ActivityResponse

router = APIRouter()


def build_activity_response(entry: StaffActivity) -> ActivityResponse:
    return ActivityResponse(
        id=entry.id,
        staff_id=entry.staff_id,
        action_type=entry.action_type,
        entity_type=entry.entity_type,
        entity_id=entry.entity_id,
        details=entry.details,
        created_at=entry.created_at,
        action_display=entry.action_display,
        staff_name=entry.staff.full_name if entry.staff else ""
    )


@router.get("/", response_model=ActivityListResponse)
async def list_activity(
    *,
    db: AsyncSession = Depends(get_db),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    action_type: Optional[str] = Query(None),
    entity_type: Optional[str] = Query(None),
    staff_id: Optional[str] = Query(None)) -> Any:
    """Staff activity, newest first"""
    query = select(StaffActivity).options(selectinload(StaffActivity.staff))

    conditions = []
    if action_type:
        conditions.append(StaffActivity.action_type == action_type)
    if entity_type:
        conditions.append(StaffActivity.entity_type == entity_type)
    if staff_id:
        conditions.append(StaffActivity.staff_id == staff_id)

    if conditions:
        query = query.where(and_(*conditions))

    count_query = select(func.count(StaffActivity.id))
    if conditions:
        count_query = count_query.where(and_(*conditions))
    total_result = await db.execute(count_query)
    total = total_result.scalar() or 0

    query = query.order_by(StaffActivity.created_at.desc(), StaffActivity.id.desc())
    query = query.offset((page - 1) * limit).limit(limit)

    result = await db.execute(query)
    entries = result.scalars().all()

    return ActivityListResponse(
        data=[build_activity_response(e) for e in entries],
        total=total,
        page=page,
        limit=limit
    )
