"""
Generation of payload manifests and tag manifests.

The :py:class:`ManifestBuilder` walks a bag's payload directory, computing
one checksum per requested algorithm for every file found.  Symbolic links
are followed; directories produce no entries, so empty directories are not
represented.  Manifest lines are sorted by path, regardless of the order in
which files were checksummed.
"""
import os, io, logging
from collections import OrderedDict

import fs.osfs
import fs.errors

from .constants import PAYLOAD_DIR, DEFAULT_ALGORITHMS
from .digest import DigestProvider, parse_algorithms, map_files
from .pathcodec import encode_path, check_path
from .exceptions import DigestFailed

LOGGER = logging.getLogger(__name__)

def manifest_name(algorithm):
    """
    return the filename of the payload manifest for the given algorithm
    """
    return "manifest-%s.txt" % algorithm

def tagmanifest_name(algorithm):
    """
    return the filename of the tag manifest for the given algorithm
    """
    return "tagmanifest-%s.txt" % algorithm

def format_manifest(entries, sep="  "):
    """
    format manifest lines from (digest, path) pairs.  The paths are encoded
    and the lines sorted by encoded path.

    :param entries:  an iterable of (hexdigest, relative path) tuples
    :param str sep:  the delimiter between the checksum and the path
    """
    lines = sorted((encode_path(path), digest) for digest, path in entries)
    return "".join("%s%s%s\n" % (digest, sep, path) for path, digest in lines)

class ManifestResult(object):
    """
    the output of a manifest generation run:  the text of a manifest for each
    algorithm and the byte and file totals over the payload.
    """

    def __init__(self, manifests, total_bytes, file_count):
        """
        :param OrderedDict manifests:  a mapping of Algorithm to manifest text
        :param int total_bytes:  the sum of the sizes of all payload files
        :param int file_count:   the number of payload files
        """
        self.manifests = manifests
        self.total_bytes = total_bytes
        self.file_count = file_count

    @property
    def oxum(self):
        """
        the Payload-Oxum value, "{total_bytes}.{file_count}"
        """
        return "%d.%d" % (self.total_bytes, self.file_count)

class ManifestBuilder(object):
    """
    a class that computes the payload manifests for a bag.

    Digests are computed via a :py:class:`~simplebag.digest.DigestProvider`
    rooted at the bag directory; up to ``processes`` files are checksummed
    at once.
    """

    def __init__(self, bagdir, algorithms=DEFAULT_ALGORITHMS, processes=1,
                 provider=None, payload_dir=PAYLOAD_DIR):
        """
        :param str bagdir:   the root directory of the bag
        :param algorithms:   the names of the algorithms to compute manifests for
        :param int processes:  the maximum number of files to checksum at once
        :param DigestProvider provider:  the digest calculator to use; if not
                             provided, one will be created for the bag directory
        :param str payload_dir:  the name of the payload directory (relative
                             to bagdir)
        :raises UnsupportedAlgorithm:  if any of the algorithms is not supported
        """
        self.algorithms = parse_algorithms(algorithms)
        if not self.algorithms:
            raise ValueError("ManifestBuilder: no checksum algorithms requested")
        if processes < 1:
            raise ValueError("ManifestBuilder: processes must be greater than 0")

        self.bagdir = bagdir
        self.processes = processes
        self.payload_dir = check_path(payload_dir.strip('/'))
        if not provider:
            provider = DigestProvider(bagdir)
        self.provider = provider
        self.fs = provider.fs

    def payload_files(self):
        """
        return the paths, relative to the bag directory, of all of the files
        found below the payload directory, in sorted order.
        """
        if not self.fs.isdir(self.payload_dir):
            return []
        return sorted(f.lstrip('/') for f in self.fs.walk.files(self.payload_dir))

    def _calc_file(self, path):
        try:
            size = self.fs.getinfo(path, namespaces=['details']).size
        except fs.errors.FSError as ex:
            raise DigestFailed(path, ", ".join(str(a) for a in self.algorithms),
                               str(ex))
        return path, size, self.provider.digests(path, self.algorithms)

    def build(self):
        """
        checksum all of the payload files and return the resulting manifests.
        No files are written.

        :rtype: ManifestResult
        :raises DigestFailed:  if any file cannot be read
        """
        LOGGER.info("Generating manifest files for algorithms: %s",
                    " ".join(str(a) for a in self.algorithms))

        try:
            results = map_files(self._calc_file, self.payload_files(),
                                self.processes)
        except DigestFailed as ex:
            LOGGER.error(str(ex))
            raise

        total_bytes = 0
        file_count = 0
        entries = OrderedDict((alg, []) for alg in self.algorithms)
        for path, size, digests in results:
            total_bytes += size
            file_count += 1
            for alg, digest in digests.items():
                entries[alg].append((digest, path))

        manifests = OrderedDict(
            (alg, format_manifest(entries[alg])) for alg in self.algorithms
        )
        return ManifestResult(manifests, total_bytes, file_count)

    def write(self, result, allow_empty=False):
        """
        write out the manifest files for a ManifestResult.  Either all of the
        manifest files are written or none are.

        :param ManifestResult result:  the manifests to write
        :param bool allow_empty:  if False (default), no manifest files will be
                                  written for an empty payload
        :return: the names of the files written
        :rtype: list of str
        """
        if not result.file_count and not allow_empty:
            LOGGER.info("Payload is empty; no manifest files written")
            return []
        return write_manifest_files(self.bagdir, result.manifests, manifest_name)

def write_manifest_files(bagdir, manifests, namer):
    """
    write manifest texts to files in a bag directory.  Each file is first
    written to a temporary name; they are renamed into place only after all
    have been written successfully.

    :param str bagdir:   the bag's root directory
    :param dict manifests:  a mapping of algorithm to manifest text
    :param namer:  a function that returns a filename for an algorithm
    :return: the names of the files written
    """
    staged = []
    try:
        for alg, text in manifests.items():
            name = namer(alg)
            tmp = os.path.join(bagdir, "." + name + ".tmp")
            staged.append((tmp, os.path.join(bagdir, name)))
            # undecodable filename bytes are carried as surrogates
            with io.open(tmp, 'w', encoding="utf-8", errors="surrogateescape",
                         newline='\n') as fd:
                fd.write(text)
    except Exception:
        for tmp, dest in staged:
            if os.path.exists(tmp):
                os.remove(tmp)
        raise

    for tmp, dest in staged:
        os.replace(tmp, dest)
        LOGGER.info("Created %s", os.path.basename(dest))
    return [os.path.basename(dest) for tmp, dest in staged]

def tag_files(bagdir):
    """
    return the sorted names of the tag files in a bag directory that belong
    in its tag manifests: all top-level ``.txt`` files except the tag
    manifests themselves.
    """
    return sorted(f for f in os.listdir(bagdir)
                  if f.endswith(".txt") and not f.startswith("tagmanifest-")
                     and os.path.isfile(os.path.join(bagdir, f)))

def build_tagmanifests(bagdir, algorithms, provider=None):
    """
    compute the tag manifests for a bag.

    :param str bagdir:    the bag's root directory
    :param algorithms:    the names of the algorithms to compute
    :param DigestProvider provider:  the digest calculator to use
    :rtype: OrderedDict mapping each Algorithm to tag manifest text
    :raises DigestFailed:  if any tag file cannot be read
    """
    algorithms = parse_algorithms(algorithms)
    if not provider:
        provider = DigestProvider(bagdir)

    entries = OrderedDict((alg, []) for alg in algorithms)
    for name in tag_files(bagdir):
        for alg, digest in provider.digests(name, algorithms).items():
            entries[alg].append((digest, name))

    return OrderedDict(
        (alg, format_manifest(entries[alg], sep=" ")) for alg in algorithms
    )

def write_tagmanifests(bagdir, algorithms, provider=None):
    """
    compute and write out the tag manifests for a bag.

    :return: the names of the files written
    """
    LOGGER.info("Creating tag manifests for algorithms: %s",
                " ".join(str(a) for a in parse_algorithms(algorithms)))
    manifests = build_tagmanifests(bagdir, algorithms, provider)
    return write_manifest_files(bagdir, manifests, tagmanifest_name)
