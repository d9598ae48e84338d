# encoding: utf-8
import unittest as test

import simplebag.constants as cnsts

class TestVersion(test.TestCase):

    def test_ctor(self):
        ver = cnsts.Version("0.97")
        self.assertEqual(ver._vs, "0.97")
        self.assertEqual(ver.fields, [0, 97])

        ver = cnsts.Version((1, 0))
        self.assertEqual(ver._vs, "1.0")
        self.assertEqual(ver.fields, [1, 0])

        with self.assertRaises(TypeError):
            cnsts.Version(1.0)

    def test_nonnumeric(self):
        ver = cnsts.Version("1.x")
        self.assertEqual(ver.fields, [1, -1])

    def testEQ(self):
        ver = cnsts.Version("0.97")
        self.assertEqual(ver, cnsts.Version("0.97"))
        self.assertTrue(ver == "0.97")
        self.assertFalse(ver == "0.96")
        self.assertTrue(ver != "1.0")

    def testCompare(self):
        ver = cnsts.Version("0.97")
        self.assertTrue(ver > "0.93")
        self.assertTrue(ver >= "0.97")
        self.assertTrue(ver < "1.0")
        self.assertTrue(ver <= "0.97")
        self.assertFalse(ver < "0.9")
        self.assertTrue(cnsts.Version("0.100") > ver)

    def test_str(self):
        self.assertEqual(str(cnsts.Version("0.97")), "0.97")

class TestConstants(test.TestCase):

    def test_bagit(self):
        self.assertEqual(cnsts.BAGIT_VERSION, "0.97")
        self.assertEqual(cnsts.TAG_FILE_ENCODING, "UTF-8")
        self.assertEqual(cnsts.BAGIT_TXT_TAGS,
                         ("BagIt-Version", "Tag-File-Character-Encoding"))

    def test_defaults(self):
        self.assertEqual(cnsts.DEFAULT_ALGORITHMS, ("sha256", "sha512"))
        self.assertEqual(cnsts.HASH_BLOCK_SIZE, 524288)
        self.assertIn(cnsts.VERSION, cnsts.SOFTWARE_AGENT)
        self.assertTrue(cnsts.SOFTWARE_AGENT.startswith("simplebag v"))

    def test_info_tags(self):
        self.assertEqual(len(cnsts.RECOGNIZED_INFO_TAGS), 13)
        for tag in cnsts.COMPUTED_INFO_TAGS:
            self.assertNotIn(tag, cnsts.RECOGNIZED_INFO_TAGS)


if __name__ == '__main__':
    test.main()
