from unittest import mock

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import SimpleTestCase, override_settings

from .exceptions import UploadError
from .storage import IMAGE_MIME_TYPES, upload_with_retry


def pdf():
    return SimpleUploadedFile("notes.pdf", b"%PDF-1.4", content_type="application/pdf")


@override_settings(UPLOAD_MAX_ATTEMPTS=3, UPLOAD_RETRY_DELAY_SECONDS=1)
@mock.patch("common.storage.time.sleep")
@mock.patch("common.storage.default_storage")
class UploadWithRetryTests(SimpleTestCase):
    def test_storage_errors_are_retried_with_fixed_delay(self, storage, sleep):
        storage.save.side_effect = [OSError("timeout"), OSError("timeout"), "forum/abc_notes.pdf"]
        storage.url.return_value = "/media/forum/abc_notes.pdf"

        self.assertEqual(upload_with_retry(pdf(), "forum"), "/media/forum/abc_notes.pdf")
        self.assertEqual(storage.save.call_count, 3)
        self.assertEqual(sleep.call_args_list, [mock.call(1), mock.call(1)])

        keys = {c.args[0] for c in storage.save.call_args_list}
        self.assertEqual(len(keys), 1)
        self.assertTrue(keys.pop().startswith("forum/"))

    def test_gives_up_after_three_attempts(self, storage, sleep):
        storage.save.side_effect = OSError("bucket unavailable")

        with self.assertLogs("common.storage", level="WARNING"):
            with self.assertRaises(UploadError):
                upload_with_retry(pdf(), "forum")
        self.assertEqual(storage.save.call_count, 3)
        self.assertEqual(sleep.call_count, 2)

    def test_validation_failures_are_not_retried(self, storage, sleep):
        exe = SimpleUploadedFile("run.exe", b"MZ", content_type="application/x-msdownload")
        with self.assertRaises(UploadError):
            upload_with_retry(exe, "forum")

        with self.assertRaises(UploadError):
            upload_with_retry(pdf(), "avatars", allowed_types=IMAGE_MIME_TYPES)

        storage.save.assert_not_called()
        sleep.assert_not_called()

    @override_settings(UPLOAD_MAX_BYTES=4)
    def test_oversized_file_rejected(self, storage, sleep):
        with self.assertRaises(UploadError):
            upload_with_retry(pdf(), "forum")
        storage.save.assert_not_called()
