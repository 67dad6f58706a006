"""
Staff activity log - audit trail of billing actions
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from billing.db.base import Base, utcnow


class StaffActivity(Base):
    """One audited staff action

    Action types written by this service:
    - confirm_payment
    - reject_payment
    - record_bulk_payment
    - record_ar_payment
    """
    __tablename__ = "staff_activity_log"

    id = Column(Integer, primary_key=True, index=True)

    staff_id = Column(String(36), ForeignKey("staff_users.id"), index=True)
    action_type = Column(String(50), nullable=False, index=True)

    # Table and row the action touched
    entity_type = Column(String(50), nullable=False, index=True)
    entity_id = Column(String(36), index=True)

    details = Column(JSON)

    created_at = Column(DateTime, default=utcnow, index=True)

    staff = relationship("StaffUser", foreign_keys=[staff_id])

    def __repr__(self):
        return f"<StaffActivity {self.action_type} {self.entity_type}:{self.entity_id}>"

    @property
    def action_display(self) -> str:
        action_map = {
            "confirm_payment": "Payment confirmed",
            "reject_payment": "Payment rejected",
            "record_bulk_payment": "Bulk payment recorded",
            "record_ar_payment": "AR payment recorded",
        }
        return action_map.get(self.action_type, self.action_type)
