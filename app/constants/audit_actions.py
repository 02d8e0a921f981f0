from enum import Enum


class AuditAction(str, Enum):
    # ---------------- QUOTES ----------------
    QUOTE_META = "QUOTE_META"
    QUOTE_SENT = "QUOTE_SENT"
    QUOTE_ACCEPTED = "QUOTE_ACCEPTED"
    QUOTE_REJECTED = "QUOTE_REJECTED"
    QUOTE_TOKEN_EXPIRED = "QUOTE_TOKEN_EXPIRED"

    # ---------------- PROJECTS ----------------
    PROJECT_PLAN = "PROJECT_PLAN"

    # ---------------- USERS ----------------
    USER_ACTIVATED = "USER_ACTIVATED"


class AuditTarget(str, Enum):
    QUOTE = "QUOTE"
    PROJECT = "PROJECT"
    USER = "USER"
    ORDER = "ORDER"
