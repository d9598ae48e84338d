"""
This module provides the checksum capability used to make and validate bags.

The :py:class:`Algorithm` enumeration fixes the set of supported algorithms,
each bound to its hashlib constructor.  A :py:class:`DigestProvider` computes
(and remembers) the digests of files found within a particular filesystem;
an instance is meant to be owned by a single make or validate operation.
"""
import hashlib, logging, threading
from collections import OrderedDict
from enum import Enum
from multiprocessing.pool import ThreadPool

import fs.osfs
import fs.errors
from fs.base import FS

from .constants import HASH_BLOCK_SIZE
from .exceptions import UnsupportedAlgorithm, DigestFailed

LOGGER = logging.getLogger(__name__)

class Algorithm(Enum):
    """
    the checksum algorithms that may be used in bag manifests
    """
    MD5 = "md5"
    SHA1 = "sha1"
    SHA224 = "sha224"
    SHA256 = "sha256"
    SHA384 = "sha384"
    SHA512 = "sha512"
    SHA3_224 = "sha3_224"
    SHA3_256 = "sha3_256"
    SHA3_384 = "sha3_384"
    SHA3_512 = "sha3_512"
    BLAKE2B = "blake2b"
    BLAKE2S = "blake2s"
    SHAKE_128 = "shake_128"
    SHAKE_256 = "shake_256"

    @classmethod
    def parse(cls, name):
        """
        return the Algorithm member with the given identifier (e.g. "sha256").
        An Algorithm instance is returned as is.

        :raises UnsupportedAlgorithm:  if the name is not a supported algorithm
        """
        if isinstance(name, Algorithm):
            return name
        try:
            return cls(str(name).lower())
        except ValueError:
            raise UnsupportedAlgorithm(name)

    def new(self):
        """
        return a new hash object for this algorithm
        """
        return _constructors[self]()

    def hexdigest(self, hasher):
        """
        return the lowercase hexadecimal digest from a hash object created
        via :py:meth:`new`.
        """
        if self in _shake_lengths:
            return hasher.hexdigest(_shake_lengths[self])
        return hasher.hexdigest()

    def __str__(self):
        return self.value

_constructors = {
    Algorithm.MD5:       hashlib.md5,
    Algorithm.SHA1:      hashlib.sha1,
    Algorithm.SHA224:    hashlib.sha224,
    Algorithm.SHA256:    hashlib.sha256,
    Algorithm.SHA384:    hashlib.sha384,
    Algorithm.SHA512:    hashlib.sha512,
    Algorithm.SHA3_224:  hashlib.sha3_224,
    Algorithm.SHA3_256:  hashlib.sha3_256,
    Algorithm.SHA3_384:  hashlib.sha3_384,
    Algorithm.SHA3_512:  hashlib.sha3_512,
    Algorithm.BLAKE2B:   hashlib.blake2b,
    Algorithm.BLAKE2S:   hashlib.blake2s,
    Algorithm.SHAKE_128: hashlib.shake_128,
    Algorithm.SHAKE_256: hashlib.shake_256,
}

# output lengths in bytes, matching the defaults of "openssl dgst"
_shake_lengths = {
    Algorithm.SHAKE_128: 16,
    Algorithm.SHAKE_256: 32,
}

SUPPORTED_ALGORITHMS = tuple(a.value for a in Algorithm)

def parse_algorithms(names):
    """
    convert a sequence of algorithm names to a tuple of unique Algorithm
    members, preserving order.

    :raises UnsupportedAlgorithm:  if any name is not supported
    """
    out = []
    for name in names:
        alg = Algorithm.parse(name)
        if alg not in out:
            out.append(alg)
    return tuple(out)

class DigestProvider(object):
    """
    a calculator of file digests for files within a given filesystem.
    Results are cached by file path and algorithm, so a file's digest under a
    given algorithm is only computed once over the life of the provider.
    Instances may be shared among threads.
    """

    def __init__(self, root, blocksize=HASH_BLOCK_SIZE):
        """
        :param root:  the filesystem that paths given to this provider are
                      relative to.  This is either an FS instance or the path
                      to a directory on local disk.
        :type root:   str or fs.base.FS
        :param int blocksize:  the number of bytes to read from a file at a time
        """
        if not isinstance(root, FS):
            root = fs.osfs.OSFS(root)
        self.fs = root
        self.blocksize = blocksize
        self._cache = {}
        self._lock = threading.Lock()

    def digest(self, path, algorithm):
        """
        return the lowercase hex digest of the contents of the file at the
        given path.

        :param str path:  the path to the file, relative to this provider's
                          root
        :param algorithm: the algorithm to apply
        :type algorithm:  str or Algorithm
        :raises UnsupportedAlgorithm:  if algorithm is not recognized
        :raises DigestFailed:  if the file could not be read
        """
        alg = Algorithm.parse(algorithm)
        return self.digests(path, [alg])[alg]

    def digests(self, path, algorithms):
        """
        return the digests of the file at the given path for several
        algorithms at once, reading the file only once.

        :param str path:  the path to the file, relative to this provider's
                          root
        :param algorithms: the algorithms to apply
        :rtype: OrderedDict mapping each Algorithm to its hex digest
        :raises DigestFailed:  if the file could not be read
        """
        algs = [Algorithm.parse(a) for a in algorithms]
        out = OrderedDict()
        need = []
        with self._lock:
            for alg in algs:
                if (path, alg) in self._cache:
                    out[alg] = self._cache[(path, alg)]
                else:
                    need.append(alg)

        if need:
            computed = self._calc(path, need)
            with self._lock:
                for alg, value in computed.items():
                    self._cache[(path, alg)] = value
            out.update(computed)

        return OrderedDict((alg, out[alg]) for alg in algs)

    def _calc(self, path, algorithms):
        LOGGER.debug("Calculating %s checksums for file %s",
                     ", ".join(str(a) for a in algorithms), path)
        hashers = OrderedDict((alg, alg.new()) for alg in algorithms)
        try:
            with self.fs.openbin(path) as fd:
                while True:
                    block = fd.read(self.blocksize)
                    if not block:
                        break
                    for h in hashers.values():
                        h.update(block)
        except (fs.errors.FSError, OSError) as ex:
            raise DigestFailed(path, ", ".join(str(a) for a in algorithms),
                               str(ex))

        return OrderedDict((alg, alg.hexdigest(h)) for alg, h in hashers.items())

    def clear(self):
        """
        forget all previously calculated digests
        """
        with self._lock:
            self._cache.clear()

def map_files(func, items, processes=1):
    """
    apply a function to each item in a list, running up to a given number
    of calls concurrently.  The results are returned in the order of the
    input items.  If any call raises an exception, the remaining calls are
    allowed to finish and then the first exception is re-raised.

    :param func:  the function to apply; it takes a single argument
    :param items: the items to apply the function to
    :param int processes:  the maximum number of concurrent calls
    """
    items = list(items)
    if processes is None or processes < 1:
        raise ValueError("map_files: processes must be greater than 0")
    if processes == 1 or len(items) < 2:
        return [func(i) for i in items]

    pool = ThreadPool(min(processes, len(items)))
    try:
        return pool.map(func, items)
    finally:
        pool.terminate()
