"""
Step contracts: envelope checks, field coercion, and error collection.
Run: python -m unittest tests.test_step_validation -v
"""
import json
import unittest
from datetime import date

from models import AgentType
from schemas.steps import FirmDetailsForm, PersonnelForm, QualificationsForm
from services.applicant_type import check_step, legal_steps
from services.errors import InvalidStep, ValidationFailed
from services.validation import coerce_fields, parse_step_number, validate_submission
from tests.fixtures import educational, envelope, experience, firm_form, person, professional


def _fields(err):
    return {d["field"] for d in err.details}


class TestStepNumber(unittest.TestCase):
    def test_accepts_int_and_numeric_string(self):
        self.assertEqual(parse_step_number(3), 3)
        self.assertEqual(parse_step_number(" 2 "), 2)

    def test_rejects_garbage(self):
        for value in (None, "two", 1.5, True, ""):
            with self.subTest(value=value):
                with self.assertRaises(InvalidStep):
                    parse_step_number(value)

    def test_unknown_step_is_invalid(self):
        with self.assertRaises(InvalidStep):
            validate_submission(9, envelope(9, {}))


class TestApplicantCategory(unittest.TestCase):
    def test_corporate_range_includes_firm_step(self):
        self.assertEqual(list(legal_steps(AgentType.CORPORATE)), [0, 1, 2, 3, 4, 5])

    def test_individual_skips_firm_step(self):
        self.assertEqual(list(legal_steps(AgentType.INDIVIDUAL)), [1, 2, 3, 4, 5])
        check_step(AgentType.INDIVIDUAL, 5)
        with self.assertRaises(InvalidStep) as ctx:
            check_step(AgentType.INDIVIDUAL, 0)
        self.assertIn("between 1 and 5 for INDIVIDUAL", ctx.exception.message)

    def test_negative_and_past_terminal_rejected(self):
        for step in (-1, 6):
            with self.subTest(step=step):
                with self.assertRaises(InvalidStep):
                    check_step(AgentType.CORPORATE, step)


class TestCoercion(unittest.TestCase):
    def test_only_allow_listed_fields_are_coerced(self):
        data = {
            "personnel": [{
                "educationalQualifications": [educational()],
                "professionalQualifications": [professional()],
            }],
            "mobileNumber": "9876543210",
        }
        coerce_fields(data)
        edu = data["personnel"][0]["educationalQualifications"][0]
        self.assertEqual(edu["yearOfPassing"], 2001)
        self.assertEqual(edu["marksPercent"], 72.5)
        prof = data["personnel"][0]["professionalQualifications"][0]
        self.assertEqual(prof["dateOfEnrolment"], date(2004, 7, 1))
        self.assertEqual(data["mobileNumber"], "9876543210")

    def test_unparseable_values_are_left_for_the_contract(self):
        data = {"yearOfPassing": "nineteen", "fromDate": "yesterday"}
        coerce_fields(data)
        self.assertEqual(data, {"yearOfPassing": "nineteen", "fromDate": "yesterday"})

    def test_iso_timestamp_becomes_date(self):
        data = {"dateOfBirth": "1980-05-14T00:00:00.000Z"}
        coerce_fields(data)
        self.assertEqual(data["dateOfBirth"], date(1980, 5, 14))


class TestValidateSubmission(unittest.TestCase):
    def test_valid_firm_details(self):
        submission = validate_submission(0, envelope(0, firm_form()))
        self.assertIsInstance(submission.form, FirmDetailsForm)
        self.assertEqual(submission.form.pan_number, "AAAFA1234C")
        self.assertIsNone(submission.form.correspondence_address.address_line2)

    def test_form_data_as_json_string(self):
        raw = envelope("1", json.dumps({"personnel": [person()]}), agent_type="INDIVIDUAL")
        submission = validate_submission(1, raw)
        self.assertIsInstance(submission.form, PersonnelForm)
        self.assertEqual(submission.agent_type, AgentType.INDIVIDUAL)
        self.assertEqual(submission.form.personnel[0].date_of_birth, date(1980, 5, 14))

    def test_collects_every_violation(self):
        bad_person = person(panNumber="abc", name="")
        raw = envelope(1, {"personnel": [bad_person]}, action="SUBMIT")
        with self.assertRaises(ValidationFailed) as ctx:
            validate_submission(1, raw)
        fields = _fields(ctx.exception)
        self.assertIn("action", fields)
        self.assertIn("form_data.personnel.0.panNumber", fields)
        self.assertIn("form_data.personnel.0.name", fields)

    def test_declared_step_must_match(self):
        with self.assertRaises(ValidationFailed) as ctx:
            validate_submission(4, envelope(3, {}))
        types = {d["type"] for d in ctx.exception.details}
        self.assertIn("step_mismatch", types)

    def test_invalid_json_form_data(self):
        with self.assertRaises(ValidationFailed) as ctx:
            validate_submission(0, envelope(0, "{not json"))
        self.assertEqual(ctx.exception.details[0]["type"], "json_invalid")

    def test_missing_form_data(self):
        with self.assertRaises(ValidationFailed) as ctx:
            validate_submission(4, envelope(4))
        self.assertEqual(_fields(ctx.exception), {"form_data"})

    def test_terminal_step_form_is_optional(self):
        submission = validate_submission(5, envelope(5, action="SUBMIT"))
        self.assertIsNone(submission.form)
        self.assertEqual(submission.action, "SUBMIT")

    def test_terminal_step_requires_submit(self):
        with self.assertRaises(ValidationFailed):
            validate_submission(5, envelope(5, action="SAVE"))

    def test_future_year_of_passing_rejected(self):
        form = {"personnel": [{
            "personnel_id": "p-1",
            "educationalQualifications": [educational(yearOfPassing=str(date.today().year + 1))],
        }]}
        with self.assertRaises(ValidationFailed) as ctx:
            validate_submission(2, envelope(2, form))
        self.assertIn("form_data.personnel.0.educationalQualifications.0.yearOfPassing", _fields(ctx.exception))

    def test_qualification_lists_may_be_omitted(self):
        submission = validate_submission(2, envelope(2, {"personnel": [{"personnel_id": "p-1"}]}))
        self.assertIsInstance(submission.form, QualificationsForm)
        self.assertIsNone(submission.form.personnel[0].educational_qualifications)

    def test_months_in_employment_bounded(self):
        form = {"personnel": [{"personnel_id": "p-1", "experienceDetails": [experience(monthsInEmployment="12")]}]}
        with self.assertRaises(ValidationFailed):
            validate_submission(3, envelope(3, form))

    def test_background_answers_must_be_yes_or_no(self):
        form = {"convictedOffence": "Maybe", "criminalProceedings": "No", "undischargedBankrupt": "No"}
        with self.assertRaises(ValidationFailed) as ctx:
            validate_submission(4, envelope(4, form))
        self.assertEqual(_fields(ctx.exception), {"form_data.convictedOffence"})


if __name__ == "__main__":
    unittest.main()
