# encoding: utf-8
import os, io
import tempfile, shutil
import unittest as test

import simplebag.tagfile as tf
from simplebag.exceptions import MalformedTagLine

class TestTagFile(test.TestCase):

    def test_setitem(self):
        tags = tf.TagFile()
        tags["Contact-Name"] = "Ed Summers"
        tags["External-Description"] = "line one\r\nline two"
        self.assertEqual(tags["Contact-Name"], "Ed Summers")
        self.assertEqual(tags["External-Description"], "line oneline two")
        self.assertEqual(list(tags.keys()),
                         ["Contact-Name", "External-Description"])

    def test_bad_names(self):
        tags = tf.TagFile()
        for name in ["", "Bad:Name", " Padded", "Two\nLines"]:
            with self.assertRaises(ValueError):
                tags[name] = "value"

    def test_update(self):
        tags = tf.TagFile([("B", "2"), ("A", "1")])
        tags.update({"C": "3\n"})
        self.assertEqual(list(tags.items()),
                         [("B", "2"), ("A", "1"), ("C", "3")])
        with self.assertRaises(ValueError):
            tags.update({"D:": "4"})

    def test_serialize(self):
        tags = tf.TagFile([("B", "2"), ("A", "1")])
        self.assertEqual(tags.serialize(), "A: 1\nB: 2\n")
        self.assertEqual(tags.serialize(["B", "A"]), "B: 2\nA: 1\n")

class TestParse(test.TestCase):

    def test_simple(self):
        tags = tf.parse_tags("BagIt-Version: 0.97\n"
                             "Tag-File-Character-Encoding: UTF-8\n")
        self.assertEqual(list(tags.items()),
                         [("BagIt-Version", "0.97"),
                          ("Tag-File-Character-Encoding", "UTF-8")])

    def test_value_spacing(self):
        tags = tf.parse_tags("A:no space\nB:  two spaces\nC:\nD : spaced\n")
        self.assertEqual(tags["A"], "no space")
        self.assertEqual(tags["B"], " two spaces")
        self.assertEqual(tags["C"], "")
        self.assertEqual(tags["D"], "spaced")

    def test_colon_in_value(self):
        tags = tf.parse_tags("Source-Organization: http://example.com/x\n")
        self.assertEqual(tags["Source-Organization"], "http://example.com/x")

    def test_continuation(self):
        tags = tf.parse_tags("External-Description: first\n"
                             "   second\n"
                             "\tthird\n"
                             "Contact-Name: Me\n")
        self.assertEqual(tags["External-Description"],
                         "first   second\tthird")
        self.assertEqual(tags["Contact-Name"], "Me")

    def test_blank_and_crlf(self):
        tags = tf.parse_tags("A: 1\r\n\r\n\nB: 2\r\n")
        self.assertEqual(list(tags.items()), [("A", "1"), ("B", "2")])

    def test_duplicate(self):
        tags = tf.parse_tags("A: 1\nA: 2\n")
        self.assertEqual(tags["A"], "1")

    def test_malformed(self):
        with self.assertRaises(MalformedTagLine) as cm:
            tf.parse_tags("A: 1\nnot a tag\n", "bag-info.txt")
        self.assertEqual(cm.exception.line, "not a tag")
        self.assertEqual(cm.exception.source, "bag-info.txt")
        self.assertIn("not a tag", str(cm.exception))

        with self.assertRaises(MalformedTagLine):
            tf.parse_tags("  orphan continuation\n")

    def test_serialize_roundtrip(self):
        tags = tf.TagFile([("Payload-Oxum", "5.2"),
                           ("Bagging-Date", "2026-10-19")])
        self.assertEqual(tf.parse_tags(tags.serialize()), tags)

class TestFiles(test.TestCase):

    def setUp(self):
        self.tempdir = tempfile.mkdtemp(prefix="_test_tagfile.")

    def tearDown(self):
        shutil.rmtree(self.tempdir)

    def test_write_load(self):
        path = os.path.join(self.tempdir, "bag-info.txt")
        tags = tf.TagFile([("Contact-Name", "Zoë"), ("Bag-Count", "1 of 2")])
        tags.write(path)

        with io.open(path, 'rb') as fd:
            raw = fd.read()
        self.assertEqual(raw, "Bag-Count: 1 of 2\nContact-Name: Zoë\n"
                              .encode('utf-8'))
        self.assertEqual(tf.load_tag_file(path), tags)

    def test_write_order(self):
        path = os.path.join(self.tempdir, "bagit.txt")
        tf.write_tag_file(path, {"Tag-File-Character-Encoding": "UTF-8",
                                 "BagIt-Version": "0.97"},
                          ["BagIt-Version", "Tag-File-Character-Encoding"])
        with io.open(path) as fd:
            self.assertEqual(fd.read(), "BagIt-Version: 0.97\n"
                                        "Tag-File-Character-Encoding: UTF-8\n")


if __name__ == '__main__':
    test.main()
