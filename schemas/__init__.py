from schemas.application import ApplicationRegister
from schemas.common import Address, CamelModel
from schemas.steps import (
    ACTION_SAVE,
    ACTION_SUBMIT,
    TERMINAL_STEP,
    BackgroundInformationForm,
    EducationalQualificationForm,
    ExperienceDetailForm,
    ExperienceForm,
    FirmDetailsForm,
    PersonForm,
    PersonnelForm,
    ProfessionalQualificationForm,
    QualificationsForm,
    StepEnvelope,
    TerminalAttachmentsForm,
)

__all__ = [
    "ACTION_SAVE",
    "ACTION_SUBMIT",
    "TERMINAL_STEP",
    "Address",
    "ApplicationRegister",
    "BackgroundInformationForm",
    "CamelModel",
    "EducationalQualificationForm",
    "ExperienceDetailForm",
    "ExperienceForm",
    "FirmDetailsForm",
    "PersonForm",
    "PersonnelForm",
    "ProfessionalQualificationForm",
    "QualificationsForm",
    "StepEnvelope",
    "TerminalAttachmentsForm",
]
