# app/models/enums/project_status.py
import enum

class ProjectStatus(str, enum.Enum):
    """Delivery stage; also used as the group of a ProjectPhase."""
    REQUIREMENTS = "REQUIREMENTS"
    DESIGN = "DESIGN"
    DEV = "DEV"
    QA = "QA"
    DELIVERED = "DELIVERED"
