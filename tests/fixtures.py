"""
Shared payload builders and an in-memory database test case.
"""
import io
import tempfile
import unittest
from pathlib import Path

from sqlalchemy import func, select

import models  # noqa: F401  registers tables on Base.metadata
from config import Settings
from database import Database
from services import state
from services.onboarding import submit_step
from services.storage import FileStorage

CORPORATE_ID = "c7039573-d573-4f83-9a35-e69d5b7b87fb"
INDIVIDUAL_ID = "e10906df-3ea3-4aec-820f-1845736ad049"


def address(**overrides):
    data = {
        "addressLine1": "12 MG Road",
        "addressLine2": "",
        "city": "Pune",
        "state": "Maharashtra",
        "pincode": "411001",
    }
    data.update(overrides)
    return data


def firm_form(**overrides):
    data = {
        "firmName": "Acme Valuers LLP",
        "registrationNumber": "LLP-0042",
        "panNumber": "AAAFA1234C",
        "gstNumber": "27AAAFA1234C1Z5",
        "correspondenceAddress": address(),
        "permanentAddress": address(),
        "emailAddress": "office@acmevaluers.in",
        "mobileNumber": "9876543210",
    }
    data.update(overrides)
    return data


def person(**overrides):
    data = {
        "title": "Mr",
        "name": "Ravi Kumar",
        "fatherName": "Suresh Kumar",
        "dateOfBirth": "1980-05-14",
        "wealthTaxRegistration": "No",
        "panNumber": "ABCDE1234F",
        "aadhaarNumber": "123412341234",
        "correspondenceAddress": address(),
        "permanentAddress": address(),
        "emailAddress": "ravi@acmevaluers.in",
        "mobileNumber": "9123456780",
        "isSameAsCorrespondence": True,
    }
    data.update(overrides)
    return data


def educational(**overrides):
    data = {
        "qualification": "B.Com",
        "yearOfPassing": "2001",
        "marksPercent": "72.5",
        "gradeClass": "First",
        "universityCollege": "University of Pune",
    }
    data.update(overrides)
    return data


def professional(**overrides):
    data = {
        "qualification": "Chartered Accountant",
        "institute": "ICAI",
        "membershipNo": "M-556677",
        "dateOfEnrolment": "2004-07-01",
    }
    data.update(overrides)
    return data


def experience(**overrides):
    data = {
        "currentlyInPracticeOrEmployment": "Employment",
        "yearsInEmployment": "6",
        "monthsInEmployment": "4",
        "fromDate": "2010-01-01",
        "toDate": "2016-05-01",
        "employerNameAndDesignation": "Valuation Co, Manager",
        "areaOfWork": "Land and building",
    }
    data.update(overrides)
    return data


def background(**overrides):
    data = {
        "convictedOffence": "No",
        "criminalProceedings": "No",
        "undischargedBankrupt": "No",
    }
    data.update(overrides)
    return data


def envelope(step, form_data=None, action="SAVE", **extra):
    data = {"step_number": step, "action": action, "form_data": form_data}
    data.update(extra)
    return data


class FakeUpload:
    """Stands in for starlette's UploadFile in router and engine tests."""

    def __init__(self, filename, content=b"%PDF-1.4 test", content_type="application/pdf"):
        self.filename = filename
        self.content_type = content_type
        self.file = io.BytesIO(content)
        self.read_sizes = []

    async def read(self, size=-1):
        self.read_sizes.append(size)
        return self.file.read(size)


class DatabaseTestCase(unittest.IsolatedAsyncioTestCase):
    """Fresh in-memory SQLite database and upload directory per test."""

    async def asyncSetUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.upload_root = Path(self._tmp.name)
        self.settings = Settings(
            database_url="sqlite+aiosqlite://",
            upload_dir=self._tmp.name,
            _env_file=None,
        )
        self.db = Database(self.settings)
        await self.db.init(retries=1, delay=0)
        self.storage = FileStorage(self.upload_root)

    async def asyncTearDown(self):
        await self.db.dispose()
        self._tmp.cleanup()

    async def submit(self, app_id, raw, uploads=()):
        async with self.db.sessionmaker() as session:
            return await submit_step(
                session,
                self.storage,
                app_id,
                raw,
                uploads,
                max_file_bytes=self.settings.max_upload_bytes,
                max_files=self.settings.max_files_per_request,
            )

    async def count(self, model, **filters):
        async with self.db.sessionmaker() as session:
            stmt = select(func.count()).select_from(model).filter_by(**filters)
            return (await session.execute(stmt)).scalar_one()

    async def rows(self, model, **filters):
        async with self.db.sessionmaker() as session:
            result = await session.execute(select(model).filter_by(**filters).order_by(model.id))
            return list(result.scalars().all())

    async def application(self, app_id):
        async with self.db.sessionmaker() as session:
            return await state.get_application(session, app_id)

    def stored_files(self):
        return [p for p in self.upload_root.rglob("*") if p.is_file()]

    async def start_corporate(self, app_id=CORPORATE_ID):
        return await self.submit(app_id, envelope(0, firm_form(), agent_type="CORPORATE"))

    async def start_individual(self, app_id=INDIVIDUAL_ID, people=None):
        roster = people if people is not None else [person()]
        return await self.submit(app_id, envelope(1, {"personnel": roster}, agent_type="INDIVIDUAL"))
