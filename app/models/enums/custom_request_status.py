# app/models/enums/custom_request_status.py
import enum

class CustomRequestStatus(str, enum.Enum):
    NEW = "NEW"
    QUOTED = "QUOTED"
    CONVERTED_TO_ORDER = "CONVERTED_TO_ORDER"
    REJECTED = "REJECTED"
