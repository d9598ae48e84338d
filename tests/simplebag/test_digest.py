# encoding: utf-8
import os, hashlib
import tempfile, shutil
import unittest as test

import fs.memoryfs

import simplebag.digest as dig
from simplebag.exceptions import UnsupportedAlgorithm, DigestFailed

class TestAlgorithm(test.TestCase):

    def test_parse(self):
        self.assertIs(dig.Algorithm.parse("sha256"), dig.Algorithm.SHA256)
        self.assertIs(dig.Algorithm.parse("SHA256"), dig.Algorithm.SHA256)
        self.assertIs(dig.Algorithm.parse("shake_128"), dig.Algorithm.SHAKE_128)
        self.assertIs(dig.Algorithm.parse(dig.Algorithm.MD5), dig.Algorithm.MD5)

        with self.assertRaises(UnsupportedAlgorithm) as cm:
            dig.Algorithm.parse("crc32")
        self.assertEqual(cm.exception.algorithm, "crc32")
        with self.assertRaises(ValueError):
            dig.Algorithm.parse("sha-256")

    def test_supported(self):
        self.assertEqual(len(dig.SUPPORTED_ALGORITHMS), 14)
        self.assertEqual(dig.SUPPORTED_ALGORITHMS[0], "md5")
        self.assertEqual(dig.SUPPORTED_ALGORITHMS[-1], "shake_256")
        self.assertEqual(str(dig.Algorithm.SHA3_512), "sha3_512")

    def test_parse_algorithms(self):
        algs = dig.parse_algorithms(["sha512", "md5", "SHA512"])
        self.assertEqual(algs, (dig.Algorithm.SHA512, dig.Algorithm.MD5))
        with self.assertRaises(UnsupportedAlgorithm):
            dig.parse_algorithms(["md5", "goob"])

    def test_known_vectors(self):
        def _hash(alg, data):
            h = alg.new()
            h.update(data)
            return alg.hexdigest(h)

        self.assertEqual(_hash(dig.Algorithm.MD5, b"abc"),
                         "900150983cd24fb0d6963f7d28e17f72")
        self.assertEqual(_hash(dig.Algorithm.SHA1, b"abc"),
                         "a9993e364706816aba3e25717850c26c9cd0d89d")
        self.assertEqual(_hash(dig.Algorithm.SHA256, b"abc"),
              "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad")
        self.assertEqual(_hash(dig.Algorithm.SHA256, b""),
              "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855")

    def test_shake_lengths(self):
        h = dig.Algorithm.SHAKE_128.new()
        h.update(b"abc")
        self.assertEqual(len(dig.Algorithm.SHAKE_128.hexdigest(h)), 32)
        h = dig.Algorithm.SHAKE_256.new()
        h.update(b"abc")
        self.assertEqual(len(dig.Algorithm.SHAKE_256.hexdigest(h)), 64)

class TestDigestProvider(test.TestCase):

    def setUp(self):
        self.tempdir = tempfile.mkdtemp(prefix="_test_digest.")
        self.content = b"The quick brown fox jumps over the lazy dog\n" * 100
        with open(os.path.join(self.tempdir, "fox.txt"), 'wb') as fd:
            fd.write(self.content)
        self.prov = dig.DigestProvider(self.tempdir, blocksize=64)

    def tearDown(self):
        shutil.rmtree(self.tempdir)

    def test_digest(self):
        self.assertEqual(self.prov.digest("fox.txt", "sha256"),
                         hashlib.sha256(self.content).hexdigest())
        self.assertEqual(self.prov.digest("fox.txt", dig.Algorithm.BLAKE2S),
                         hashlib.blake2s(self.content).hexdigest())

    def test_all_algorithms(self):
        out = self.prov.digests("fox.txt", dig.SUPPORTED_ALGORITHMS)
        self.assertEqual(list(out.keys()), list(dig.Algorithm))
        for name in ["md5", "sha1", "sha224", "sha256", "sha384", "sha512",
                     "sha3_224", "sha3_256", "sha3_384", "sha3_512",
                     "blake2b", "blake2s"]:
            self.assertEqual(out[dig.Algorithm(name)],
                             hashlib.new(name, self.content).hexdigest(), name)
        self.assertEqual(out[dig.Algorithm.SHAKE_128],
                         hashlib.shake_128(self.content).hexdigest(16))
        self.assertEqual(out[dig.Algorithm.SHAKE_256],
                         hashlib.shake_256(self.content).hexdigest(32))

    def test_cache(self):
        first = self.prov.digest("fox.txt", "md5")
        with open(os.path.join(self.tempdir, "fox.txt"), 'wb') as fd:
            fd.write(b"changed")
        self.assertEqual(self.prov.digest("fox.txt", "md5"), first)

        # a new algorithm requires a fresh read
        self.assertEqual(self.prov.digest("fox.txt", "sha1"),
                         hashlib.sha1(b"changed").hexdigest())

        self.prov.clear()
        self.assertEqual(self.prov.digest("fox.txt", "md5"),
                         hashlib.md5(b"changed").hexdigest())

    def test_missing(self):
        with self.assertRaises(DigestFailed) as cm:
            self.prov.digest("goob.txt", "md5")
        self.assertEqual(cm.exception.filename, "goob.txt")
        self.assertEqual(cm.exception.algorithm, "md5")
        self.assertIn("goob.txt", str(cm.exception))

    def test_unsupported(self):
        with self.assertRaises(UnsupportedAlgorithm):
            self.prov.digest("fox.txt", "crc32")

    def test_fs(self):
        mem = fs.memoryfs.MemoryFS()
        mem.writebytes("abc.txt", b"abc")
        prov = dig.DigestProvider(mem)
        self.assertEqual(prov.digest("abc.txt", "md5"),
                         "900150983cd24fb0d6963f7d28e17f72")

class TestMapFiles(test.TestCase):

    def test_serial(self):
        self.assertEqual(dig.map_files(lambda x: x*2, [1, 2, 3]), [2, 4, 6])
        self.assertEqual(dig.map_files(lambda x: x*2, []), [])

    def test_parallel(self):
        self.assertEqual(dig.map_files(lambda x: x+1, range(20), 4),
                         list(range(1, 21)))

    def test_error(self):
        def _f(x):
            if x == 3:
                raise DigestFailed("file3", "md5", "boom")
            return x
        with self.assertRaises(DigestFailed):
            dig.map_files(_f, range(6), 3)
        with self.assertRaises(DigestFailed):
            dig.map_files(_f, range(6), 1)

    def test_bad_processes(self):
        with self.assertRaises(ValueError):
            dig.map_files(str, [1], 0)


if __name__ == '__main__':
    test.main()
