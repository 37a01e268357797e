from models.application import AgentType, Application, ApplicationStatus
from models.attachment import Attachment
from models.background import BackgroundInformation
from models.firm import FirmDetails
from models.personnel import (
    EducationalQualification,
    ExperienceDetail,
    Personnel,
    ProfessionalQualification,
)

__all__ = [
    "AgentType",
    "Application",
    "ApplicationStatus",
    "Attachment",
    "BackgroundInformation",
    "EducationalQualification",
    "ExperienceDetail",
    "FirmDetails",
    "Personnel",
    "ProfessionalQualification",
]
