# app/models/enums/milestone_status.py
import enum

class MilestoneStatus(str, enum.Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    CANCELLED = "CANCELLED"
