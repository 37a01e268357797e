"""
Upload routing: per-step file rules, limits, and personnel photo mapping.
Run: python -m unittest tests.test_attachments -v
"""
import tempfile
import unittest
from pathlib import Path

from services.attachments import route_uploads
from services.errors import FileRejected
from services.storage import FileStorage, sanitize_filename
from tests.fixtures import FakeUpload

MB = 1024 * 1024


async def _route(step, uploads, roster_size=None, max_file_bytes=10 * MB, max_files=20):
    return await route_uploads(
        step,
        uploads,
        max_file_bytes=max_file_bytes,
        max_files=max_files,
        roster_size=roster_size,
    )


class TestRouteUploads(unittest.IsolatedAsyncioTestCase):
    async def test_no_uploads_on_any_step(self):
        routed = await _route(4, [])
        self.assertFalse(routed)
        self.assertEqual(routed.count, 0)

    async def test_step_without_uploads_rejects_files(self):
        for step in (2, 4):
            with self.subTest(step=step):
                with self.assertRaises(FileRejected):
                    await _route(step, [("evidence", FakeUpload("a.pdf"))])

    async def test_groups_by_field_and_names_document_type(self):
        routed = await _route(0, [
            ("registration_certificate", FakeUpload("reg.pdf")),
            ("registration_certificate", FakeUpload("reg-2.PDF")),
            ("pan_card", FakeUpload("pan.jpg", content_type="image/jpeg")),
        ])
        self.assertEqual(routed.count, 3)
        self.assertEqual(len(routed.groups["registration_certificate"]), 2)
        doc = routed.groups["pan_card"][0]
        self.assertEqual(routed.document_type(doc), "FIRM_DETAILS_pan_card")

    async def test_extension_checked_per_step(self):
        with self.assertRaises(FileRejected):
            await _route(1, [("personnel[0][photo]", FakeUpload("photo.pdf"))], roster_size=1)
        with self.assertRaises(FileRejected):
            await _route(0, [("deed", FakeUpload("deed.docx"))])
        routed = await _route(5, [("moa_aoa", FakeUpload("moa.docx"))])
        self.assertEqual(routed.document_type(routed.documents()[0]), "FINAL_ATTACHMENTS_moa_aoa")

    async def test_missing_extension_rejected(self):
        with self.assertRaises(FileRejected):
            await _route(5, [("kyc_documents", FakeUpload("README"))])

    async def test_size_limit(self):
        big = FakeUpload("big.pdf", content=b"x" * (MB + 1))
        with self.assertRaises(FileRejected) as ctx:
            await _route(3, [("evidence", big)], max_file_bytes=MB)
        self.assertIn("1MB", ctx.exception.message)

    async def test_oversized_part_is_never_read_whole(self):
        big = FakeUpload("big.pdf", content=b"x" * (50 * MB))
        with self.assertRaises(FileRejected):
            await _route(5, [("it_returns", big)], max_file_bytes=10 * MB)
        self.assertNotIn(-1, big.read_sizes)
        self.assertTrue(all(0 < size <= MB for size in big.read_sizes))
        self.assertLessEqual(big.file.tell(), 11 * MB)

    async def test_part_at_the_limit_is_accepted(self):
        exact = FakeUpload("exact.pdf", content=b"x" * (2 * MB))
        routed = await _route(5, [("it_returns", exact)], max_file_bytes=2 * MB)
        self.assertEqual(routed.documents()[0].size, 2 * MB)

    async def test_file_count_limit(self):
        uploads = [("kyc_documents", FakeUpload(f"{i}.pdf")) for i in range(3)]
        with self.assertRaises(FileRejected):
            await _route(5, uploads, max_files=2)

    async def test_photos_map_to_roster_index(self):
        routed = await _route(1, [
            ("personnel[0][photo]", FakeUpload("a.png", content_type="image/png")),
            ("personnel[1][photo]", FakeUpload("b.jpg", content_type="image/jpeg")),
            ("personnel[1][signature]", FakeUpload("sig.png", content_type="image/png")),
        ], roster_size=2)
        photos = routed.photos()
        self.assertEqual(sorted(photos), [0, 1])
        self.assertEqual(photos[1].original_name, "b.jpg")
        docs = routed.documents()
        self.assertEqual(len(docs), 1)
        self.assertEqual(docs[0].personnel_index, 1)

    async def test_photo_index_outside_roster(self):
        with self.assertRaises(FileRejected):
            await _route(1, [("personnel[2][photo]", FakeUpload("c.png"))], roster_size=2)

    async def test_one_photo_per_person(self):
        with self.assertRaises(FileRejected):
            await _route(1, [
                ("personnel[0][photo]", FakeUpload("a.png")),
                ("personnel[0][photo]", FakeUpload("b.png")),
            ], roster_size=1)


class TestFileStorage(unittest.TestCase):
    def test_sanitize_filename(self):
        self.assertEqual(sanitize_filename("../../etc/pass wd.pdf"), "pass_wd.pdf")
        self.assertEqual(sanitize_filename(""), "upload")

    def test_save_and_remove(self):
        with tempfile.TemporaryDirectory() as tmp:
            storage = FileStorage(tmp)
            stored = storage.save("app/1", "My Deed.pdf", b"content")
            path = Path(tmp) / stored.file_path
            self.assertTrue(path.is_file())
            self.assertTrue(stored.file_name.endswith("_My_Deed.pdf"))
            self.assertEqual(stored.size, 7)
            self.assertFalse(list(Path(tmp).rglob("*.part")))
            storage.remove(stored)
            self.assertFalse(path.exists())


if __name__ == "__main__":
    unittest.main()
