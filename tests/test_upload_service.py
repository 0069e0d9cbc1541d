import os
import shutil
import tempfile
import unittest
from unittest.mock import patch

from core import upload_service
from core.config import cfg
from core.errors import ValidationError


class UploadServiceTestCase(unittest.TestCase):
    def setUp(self):
        self.origin_dir = cfg.get("uploads.dir")
        self.origin_max = cfg.get("uploads.max_bytes")
        self.tmp = tempfile.mkdtemp()
        cfg.set("uploads.dir", self.tmp)

    def tearDown(self):
        cfg.set("uploads.dir", self.origin_dir)
        cfg.set("uploads.max_bytes", self.origin_max)
        shutil.rmtree(self.tmp, ignore_errors=True)

    @patch.object(upload_service, "is_qiniu_configured", return_value=False)
    def test_save_image_writes_local_file(self, _):
        url = upload_service.save_image("logo_file", "Logo.PNG", "image/png", b"\x89PNGdata")
        self.assertTrue(url.startswith("/uploads/logo_file-"))
        self.assertTrue(url.endswith(".png"))
        name = url.rsplit("/", 1)[-1]
        with open(os.path.join(self.tmp, name), "rb") as f:
            self.assertEqual(f.read(), b"\x89PNGdata")

    def test_rejects_non_images(self):
        with self.assertRaises(ValidationError) as ctx:
            upload_service.save_image("logo_file", "run.sh", "text/x-shellscript", b"echo")
        self.assertEqual(ctx.exception.message, "Only image files are allowed!")
        # 扩展名合法但 MIME 不合法也拒绝
        with self.assertRaises(ValidationError):
            upload_service.save_image("logo_file", "fake.png", "application/octet-stream", b"x")
        self.assertEqual(os.listdir(self.tmp), [])

    def test_rejects_oversized_and_empty(self):
        cfg.set("uploads.max_bytes", 4)
        with self.assertRaises(ValidationError) as ctx:
            upload_service.save_image("hero_image_file", "a.jpg", "image/jpeg", b"12345")
        self.assertEqual(ctx.exception.message, "File too large")
        with self.assertRaises(ValidationError) as ctx:
            upload_service.save_image("hero_image_file", "a.jpg", "image/jpeg", b"")
        self.assertEqual(ctx.exception.message, "Empty file")

    @patch.object(upload_service, "is_qiniu_configured", return_value=False)
    def test_discard_image_removes_local_file(self, _):
        url = upload_service.save_image("logo_file", "a.gif", "image/gif", b"GIF89a")
        self.assertEqual(len(os.listdir(self.tmp)), 1)
        upload_service.discard_image(url)
        self.assertEqual(os.listdir(self.tmp), [])
        # 已删除或不存在的文件不报错
        upload_service.discard_image(url)
        upload_service.discard_image("")

    @patch.object(upload_service, "_push_to_qiniu", return_value="https://cdn.example.edu/uploads/x.png")
    @patch.object(upload_service, "is_qiniu_configured", return_value=True)
    def test_qiniu_url_preferred_when_configured(self, _configured, push):
        url = upload_service.save_image("logo_file", "x.png", "image/png", b"img")
        self.assertEqual(url, "https://cdn.example.edu/uploads/x.png")
        self.assertTrue(push.call_args[0][0].startswith("uploads/logo_file-"))

    @patch.object(upload_service, "_push_to_qiniu", return_value="")
    @patch.object(upload_service, "is_qiniu_configured", return_value=True)
    def test_qiniu_failure_keeps_local_url(self, *_):
        url = upload_service.save_image("logo_file", "x.webp", "image/webp", b"img")
        self.assertTrue(url.startswith("/uploads/"))


if __name__ == "__main__":
    unittest.main()
