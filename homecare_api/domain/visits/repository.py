"""Visit repository - Database operations for visits"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...constants import VisitStatus
from ...models import Visit


class VisitRepository:
    """Repository for visit database operations"""

    @staticmethod
    def get_by_id(db: Session, visit_id: int) -> Optional[Visit]:
        return (
            db.query(Visit)
            .options(joinedload(Visit.user), joinedload(Visit.patient))
            .filter(Visit.id == visit_id)
            .first()
        )

    @staticmethod
    def search_visits(
        db: Session,
        user_id: Optional[int] = None,
        patient_id: Optional[int] = None,
        progress: Optional[int] = None,
        status: Optional[int] = int(VisitStatus.ACTIVE),
        starts_from: Optional[datetime] = None,
        starts_before: Optional[datetime] = None,
    ) -> list[Visit]:
        """Visits matching every given filter, latest start first"""
        query = db.query(Visit)

        if user_id is not None:
            query = query.filter(Visit.user_id == user_id)
        if patient_id is not None:
            query = query.filter(Visit.patient_id == patient_id)
        if progress is not None:
            query = query.filter(Visit.progress == progress)
        if status is not None:
            query = query.filter(Visit.status == status)
        if starts_from is not None:
            query = query.filter(Visit.start_time >= starts_from)
        if starts_before is not None:
            query = query.filter(Visit.start_time < starts_before)

        return query.order_by(Visit.start_time.desc(), Visit.id.desc()).all()

    @staticmethod
    def create_visit(db: Session, **visit_data) -> Visit:
        visit = Visit(**visit_data)
        db.add(visit)
        db.commit()
        db.refresh(visit)
        return visit

    @staticmethod
    def update_visit(db: Session, visit: Visit, **updates) -> Visit:
        for key, value in updates.items():
            if hasattr(visit, key):
                setattr(visit, key, value)

        db.commit()
        db.refresh(visit)
        return visit

    @staticmethod
    def transition_visit(db: Session, visit_id: int, expected_progress: int, values: dict) -> bool:
        """
        Write a progress change only if the visit is still active and in
        expected_progress. Returns False when another request got there first.
        """
        updated = (
            db.query(Visit)
            .filter(
                Visit.id == visit_id,
                Visit.progress == expected_progress,
                Visit.status == int(VisitStatus.ACTIVE),
            )
            .update(values, synchronize_session=False)
        )
        db.commit()
        return updated == 1
