# encoding: utf-8
import unittest as test

import simplebag.pathcodec as pc
from simplebag.exceptions import DangerousPath

class TestEncoding(test.TestCase):

    def test_encode(self):
        self.assertEqual(pc.encode_path("data/a.txt"), "data/a.txt")
        self.assertEqual(pc.encode_path("data/a\rb.txt"), "data/a%0Db.txt")
        self.assertEqual(pc.encode_path("data/a\nb.txt"), "data/a%0Ab.txt")
        self.assertEqual(pc.encode_path("data/\r\n"), "data/%0D%0A")

    def test_encode_leaves_percent(self):
        self.assertEqual(pc.encode_path("data/100%.txt"), "data/100%.txt")
        self.assertEqual(pc.encode_path("data/%41"), "data/%41")

    def test_decode(self):
        self.assertEqual(pc.decode_path("data/a.txt"), "data/a.txt")
        self.assertEqual(pc.decode_path("data/a%0Db.txt"), "data/a\rb.txt")
        self.assertEqual(pc.decode_path("data/a%0Ab.txt"), "data/a\nb.txt")
        self.assertEqual(pc.decode_path("data/%0D%0A"), "data/\r\n")
        self.assertEqual(pc.decode_path("data/100%.txt"), "data/100%.txt")
        self.assertEqual(pc.decode_path("data/%0d"), "data/%0d")

    def test_roundtrip(self):
        for path in ["data/plain", "data/with\rcr", "data/with\nlf",
                     "data/both\r\n\n\r", "data/sp ace/ü.txt"]:
            self.assertEqual(pc.decode_path(pc.encode_path(path)), path)

class TestDangerous(test.TestCase):

    def test_safe(self):
        self.assertFalse(pc.is_dangerous("data/a.txt"))
        self.assertFalse(pc.is_dangerous("data/a..b/c"))
        self.assertFalse(pc.is_dangerous("data/~user"))
        self.assertFalse(pc.is_dangerous("bagit.txt"))
        self.assertFalse(pc.is_dangerous(""))

    def test_dangerous(self):
        self.assertTrue(pc.is_dangerous("/etc/passwd"))
        self.assertTrue(pc.is_dangerous("../etc/passwd"))
        self.assertTrue(pc.is_dangerous("data/../../x"))
        self.assertTrue(pc.is_dangerous("data/.."))
        self.assertTrue(pc.is_dangerous("~/.bashrc"))
        self.assertTrue(pc.is_dangerous("~root/x"))
        self.assertTrue(pc.is_dangerous("C:\\Windows"))
        self.assertTrue(pc.is_dangerous("data\\..\\x"))

    def test_check_path(self):
        self.assertEqual(pc.check_path("data/a.txt"), "data/a.txt")
        with self.assertRaises(DangerousPath) as cm:
            pc.check_path("../x", "manifest-md5.txt")
        self.assertEqual(cm.exception.path, "../x")
        self.assertEqual(cm.exception.source, "manifest-md5.txt")
        self.assertIn("manifest-md5.txt", str(cm.exception))


if __name__ == '__main__':
    test.main()
