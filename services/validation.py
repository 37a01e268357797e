"""
Step schema registry: one contract per step index.

A submission is validated in two layers: the shared envelope (step_number,
action, form_data) and the step's form. Every violation from both layers is
collected and reported together.
"""
from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from models import AgentType
from schemas.steps import (
    ACTION_SAVE,
    ACTION_SUBMIT,
    BackgroundInformationForm,
    ExperienceForm,
    FirmDetailsForm,
    PersonnelForm,
    QualificationsForm,
    StepEnvelope,
    StepForm,
    TerminalAttachmentsForm,
)
from services.errors import InvalidStep, ValidationFailed

# Only these keys are coerced from strings; everything else keeps its wire type.
NUMERIC_FIELDS = frozenset({
    "yearOfPassing",
    "marksPercent",
    "yearsInPractice",
    "yearsInEmployment",
    "monthsInEmployment",
})
DATE_FIELDS = frozenset({
    "dateOfBirth",
    "dateOfEnrolment",
    "fromDate",
    "toDate",
})


@dataclass(frozen=True)
class StepContract:
    step: int
    action: str
    form_model: type[BaseModel]
    form_required: bool = True


@dataclass
class StepSubmission:
    step: int
    action: str
    form: Optional[StepForm]
    agent_type: Optional[AgentType] = None


STEP_CONTRACTS: dict[int, StepContract] = {
    0: StepContract(0, ACTION_SAVE, FirmDetailsForm),
    1: StepContract(1, ACTION_SAVE, PersonnelForm),
    2: StepContract(2, ACTION_SAVE, QualificationsForm),
    3: StepContract(3, ACTION_SAVE, ExperienceForm),
    4: StepContract(4, ACTION_SAVE, BackgroundInformationForm),
    # The deliverable of the terminal step is the uploaded files; the JSON echo is optional.
    5: StepContract(5, ACTION_SUBMIT, TerminalAttachmentsForm, form_required=False),
}


def parse_step_number(value: Any) -> int:
    """Read the declared step from an int or numeric string; InvalidStep otherwise."""
    if isinstance(value, bool):
        raise InvalidStep(f"Invalid step_number: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise InvalidStep(f"Invalid step_number: {value!r}")


def get_contract(step: int) -> StepContract:
    contract = STEP_CONTRACTS.get(step)
    if contract is None:
        raise InvalidStep(f"Invalid step_number. No step {step} exists")
    return contract


def _to_number(s: str) -> Any:
    try:
        return int(s)
    except ValueError:
        pass
    try:
        return float(s)
    except ValueError:
        return s


def _to_date(s: str) -> Any:
    try:
        return datetime.fromisoformat(s).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(s[:10])
    except ValueError:
        return s


def coerce_fields(obj: Any) -> Any:
    """
    Recursively coerce allow-listed string fields to numbers or dates (in place).
    Unparseable values are left as-is so the form contract reports them.
    """
    if isinstance(obj, list):
        for item in obj:
            coerce_fields(item)
    elif isinstance(obj, dict):
        for key, value in obj.items():
            if isinstance(value, str):
                stripped = value.strip()
                if key in NUMERIC_FIELDS and stripped:
                    obj[key] = _to_number(stripped)
                elif key in DATE_FIELDS and stripped:
                    obj[key] = _to_date(stripped)
            elif isinstance(value, (dict, list)):
                coerce_fields(value)
    return obj


def format_error_details(errors: Sequence[Mapping[str, Any]], prefix: str = "") -> list[dict[str, Any]]:
    """Flatten pydantic error dicts into {field, message, type} entries with dotted paths."""
    details = []
    for err in errors:
        path = ".".join(str(p) for p in (prefix, *err["loc"]) if p != "")
        details.append({"field": path, "message": err["msg"], "type": err["type"]})
    return details


def normalize_form_data(form_data: Any) -> Any:
    """Multipart requests carry form_data as a JSON string; decode it to a structured value."""
    if isinstance(form_data, str):
        if form_data.strip() == "":
            return None
        return json.loads(form_data)
    return form_data


def validate_submission(step: int, raw: dict[str, Any]) -> StepSubmission:
    """
    Validate a raw step envelope against the contract for `step`.
    Raises ValidationFailed listing every violated field.
    """
    contract = get_contract(step)
    errors: list[dict[str, Any]] = []

    try:
        envelope = StepEnvelope.model_validate(raw)
    except ValidationError as e:
        raise ValidationFailed("Validation error", details=format_error_details(e.errors())) from e

    try:
        declared = parse_step_number(envelope.step_number)
    except InvalidStep:
        declared = None
    if declared != contract.step:
        errors.append({
            "field": "step_number",
            "message": f"must be {contract.step}",
            "type": "step_mismatch",
        })
    if envelope.action != contract.action:
        errors.append({
            "field": "action",
            "message": f"must be {contract.action!r} for step {contract.step}",
            "type": "action_mismatch",
        })

    form: Optional[StepForm] = None
    try:
        form_data = normalize_form_data(envelope.form_data)
    except json.JSONDecodeError:
        errors.append({"field": "form_data", "message": "form_data is not valid JSON", "type": "json_invalid"})
    else:
        if form_data is None:
            if contract.form_required:
                errors.append({"field": "form_data", "message": "Field required", "type": "missing"})
        else:
            coerce_fields(form_data)
            try:
                form = contract.form_model.model_validate(form_data)
            except ValidationError as e:
                errors.extend(format_error_details(e.errors(), "form_data"))

    if errors:
        raise ValidationFailed("Validation error", details=errors)
    return StepSubmission(
        step=contract.step,
        action=envelope.action,
        form=form,
        agent_type=envelope.agent_type,
    )
