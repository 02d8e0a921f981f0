# app/models/enums/referral_status.py
import enum

class ReferralStatus(str, enum.Enum):
    PENDING = "PENDING"
    EARNED = "EARNED"
    PAID = "PAID"
