# app/models/enums/user_role.py
import enum

class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    PARTNER = "PARTNER"
    CLIENT = "CLIENT"

STAFF_ROLES = {UserRole.ADMIN, UserRole.PARTNER}
