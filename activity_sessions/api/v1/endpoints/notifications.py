# activity_sessions/api/v1/endpoints/notifications.py
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from activity_sessions import crud
from activity_sessions.api import deps
from activity_sessions.schemas.notification import (
    Notification,
    NotificationIds,
    NotificationPage,
    UnreadCount,
)
from activity_sessions.schemas.token import TokenPayload

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=NotificationPage)
def list_notifications(
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    unread_only: bool = False,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    notifications, total = crud.notification.get_multi_for_user(
        db,
        user_id=current_user.user_id,
        limit=limit,
        offset=offset,
        unread_only=unread_only,
    )
    return NotificationPage(
        notifications=[Notification.model_validate(n) for n in notifications],
        total=total,
    )


@router.get("/count", response_model=UnreadCount)
def get_unread_count(
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    return UnreadCount(count=crud.notification.get_unread_count(db, user_id=current_user.user_id))


@router.patch("/read-all")
def mark_all_as_read(
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    updated = crud.notification.mark_all_as_read(db, user_id=current_user.user_id)
    return {"updated": updated}


@router.patch("/{notification_id}/read")
def mark_as_read(
    notification_id: str,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    updated = crud.notification.mark_as_read(
        db, notification_id=notification_id, user_id=current_user.user_id
    )
    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    return {"updated": updated}


@router.post("/delete-many")
def delete_many_notifications(
    ids_in: NotificationIds,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    deleted = crud.notification.delete_multiple(
        db, notification_ids=ids_in.ids, user_id=current_user.user_id
    )
    return {"deleted": deleted}


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(
    notification_id: str,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    deleted = crud.notification.delete(
        db, notification_id=notification_id, user_id=current_user.user_id
    )
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")


@router.delete("")
def delete_all_notifications(
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    deleted = crud.notification.delete_all(db, user_id=current_user.user_id)
    return {"deleted": deleted}
