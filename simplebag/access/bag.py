"""
This module provides read-only access to the contents of an existing bag.

File access goes through the fs (pyfilesystem2) module, so that a bag can
be addressed either by a directory path on local disk or by an FS URL
(e.g. ``osfs:///path/to/bag``).  Reading a bag never changes it; opening a
bag does not parse anything, so a malformed bag can still be opened and
examined piece by piece (as the validator does).
"""
import os, re, codecs, logging
from collections import namedtuple

import fs.osfs
import fs.errors
from fs import open_fs

from ..constants import BAGIT_TXT, BAG_INFO_TXT, PAYLOAD_DIR
from ..tagfile import parse_tags
from ..pathcodec import decode_path, is_dangerous
from ..digest import DigestProvider
from ..exceptions import StructureError

LOGGER = logging.getLogger(__name__)

_manifestre = re.compile(r'^manifest-(.+)\.txt$')
_tagmanifestre = re.compile(r'^tagmanifest-(.+)\.txt$')
_entryre = re.compile(r'^([a-fA-F0-9]+)[ \t](.+)$')

ManifestEntry = namedtuple("ManifestEntry", "algorithm checksum path source".split())
ManifestEntry.__doc__ = \
"""
an entry from a manifest file:  the algorithm (the name taken from the
manifest's filename), the checksum (lower-cased), the decoded path relative
to the bag's root directory, and the name of the manifest file it came from.
"""

class Path(object):
    """
    A container class for pointing to a path within a specific FS instance
    """
    def __init__(self, filesys, path, prefix=None):
        """
        wrap a path within a filesystem, given as an FS object
        :param filesys FS:  the filesystem, usually as an FS instance,
                            where the path is located
        :param path str:    the path to the location within the filesystem
        :param prefix str:  a prefix to use to represent the filesystem in
                            the string representation of the full path.  It
                            will be prepended to the path value, so it should
                            include any desired delimiters
        """
        self.fs = filesys
        self.path = str(path)
        if prefix is None:
            prefix = repr(filesys) + ":"
        self._pfx = prefix

    def relpath(self, relpath):
        """
        return a Path instance that represents another path relative to
        this one.  This assumes that the current Path instance points to
        a directory; the relpath string then refers to a file or directory
        relative to it.  Note that relpath need not point to an existing
        object within the filesystem.
        """
        if not relpath:
            return Path(self.fs, self.path, self._pfx)

        path = ""
        if self.path:
            path += self.path+'/'
        path += relpath.lstrip('/')

        return Path(self.fs, path, self._pfx)

    def exists(self):
        """
        return true if the file or directory pointed to exists in the filesystem
        """
        return self.fs.exists(self.path)

    def isfile(self):
        """
        return true if the path points to a file that exists in the filesystem
        """
        return self.fs.isfile(self.path)

    def isdir(self):
        """
        return true if the path points to a directory that exists in the filesystem
        """
        return self.fs.isdir(self.path)

    def __str__(self):
        return "{0}{1}".format(self._pfx, self.path)

    def __repr__(self):
        return "{0}:{1}".format(repr(self.fs), self.path)

class ReadOnlyBag(object):
    """
    A read-only view of a bag.  To open a bag, the factory function
    open_bag() is recommended instead of instantiating this class directly.
    """

    def __init__(self, bagpath, name=None):
        """
        open the bag with the given location
        :param bagpath:  either a Path instance or a filepath to the bag's
                         root directory.
        :type bagpath:   str or Path
        :param str name:  the name of bag (i.e. its nominal base directory);
                          if None, the name will be the basename for the given
                          bagpath
        """
        if not bagpath:
            raise ValueError("path to bag root directory not provided")
        if not isinstance(bagpath, Path):
            bagpath = bagpath.rstrip("/") or "/"
            if not os.path.isdir(bagpath):
                raise StructureError("Bag directory does not exist: " + bagpath)
            self.path = bagpath
            bagpath = Path(fs.osfs.OSFS(bagpath), "", bagpath+"/")
        else:
            self.path = str(bagpath)

        if not name:
            name = os.path.basename(self.path.rstrip("/")) or self.path
        self.name = name
        self._root = bagpath

    def __str__(self):
        return self.path

    @property
    def fs(self):
        """
        the filesystem rooted at the bag's root directory
        """
        return self._root.fs

    def exists(self, path):
        """
        return True if the given path exists within the bag relative to the
        bag's root directory.

        :param str path:  a relative path to a directory or file within the bag
        """
        return self._root.relpath(path).exists()

    def isfile(self, path):
        """
        return True if the given path exists as a file below the
        bag's root directory.

        :param str path:  a path to a file relative to the bag's root directory
        """
        return self._root.relpath(path).isfile()

    def isdir(self, path):
        """
        return True if the given path exists as a directory below the
        bag's root directory.

        :param str path:  a path to a directory relative to the bag's root
                          directory
        """
        return self._root.relpath(path).isdir()

    def sizeof(self, path):
        """
        return the size of the file in bytes located at the give path
        """
        return self.fs.getinfo(self._root.relpath(path).path,
                               namespaces=['details']).size

    def read_bytes(self, path, count=-1):
        """
        return the raw contents of a file in the bag (or its first count
        bytes)
        """
        with self.fs.openbin(self._root.relpath(path).path) as fd:
            return fd.read(count)

    def read_text(self, path, encoding='utf-8', errors='strict'):
        """
        return the decoded contents of a text file in the bag
        """
        return codecs.decode(self.read_bytes(path), encoding, errors)

    def load_tag_file(self, path, encoding='utf-8'):
        """
        read and parse a tag file from the bag.

        :rtype: TagFile
        :raises MalformedTagLine:  if the file cannot be parsed
        """
        return parse_tags(self.read_text(path, encoding), path)

    def bagit_tags(self):
        """
        return the tags from the bag's bagit.txt file
        """
        return self.load_tag_file(BAGIT_TXT)

    def info(self):
        """
        return the tags from the bag's bag-info.txt file, or None if the
        file does not exist.
        """
        if not self.isfile(BAG_INFO_TXT):
            return None
        return self.load_tag_file(BAG_INFO_TXT)

    def _listing(self, pattern):
        return sorted(f for f in self.fs.listdir(self._root.path or "/")
                      if pattern.match(f) and self.isfile(f))

    def manifest_files(self):
        """
        return the sorted names of the payload manifest files in the bag
        """
        return self._listing(_manifestre)

    def tagmanifest_files(self):
        """
        return the sorted names of the tag manifest files in the bag
        """
        return self._listing(_tagmanifestre)

    def read_manifest(self, filename):
        """
        read the entries from a manifest (or tag manifest) file.  Blank lines
        and comment lines (beginning with #) are skipped.

        :param str filename:  the name of the manifest file
        :return: a 2-tuple containing the list of ManifestEntry instances
                 and a list of the lines that could not be parsed
        """
        m = _manifestre.match(filename) or _tagmanifestre.match(filename)
        if not m:
            raise ValueError("Not a manifest filename: " + filename)
        alg = m.group(1)

        entries = []
        invalid = []
        # filename bytes that are not UTF-8 decode to surrogates, matching
        # the names found when walking the payload
        text = self.read_text(filename, errors='surrogateescape')
        if text.startswith(codecs.BOM_UTF8.decode('utf-8')):
            LOGGER.warning("%s contains an unnecessary byte-order mark",
                           filename)
            text = text[1:]

        for line in text.split('\n'):
            line = line.rstrip('\r')
            if not line.strip() or line.startswith('#'):
                continue
            match = _entryre.match(line)
            path = match and match.group(2)
            if path and path[:1] in (' ', '*') and not self._isentry(path):
                # the "digest  name" and "digest *name" forms
                path = path[1:]
            if not path:
                LOGGER.error("%s: Invalid %s manifest entry: %s",
                             self, alg, line)
                invalid.append(line)
                continue
            entries.append(ManifestEntry(alg, match.group(1).lower(),
                                         decode_path(path),
                                         filename))

        return entries, invalid

    def _isentry(self, path):
        path = decode_path(path)
        if is_dangerous(path):
            return False
        try:
            return self.isfile(path)
        except fs.errors.FSError:
            return False

    def payload_files(self):
        """
        return the sorted paths of the files under the payload directory,
        given relative to the bag's root directory.
        """
        if not self.isdir(PAYLOAD_DIR):
            return []
        payload = self._root.relpath(PAYLOAD_DIR)
        return sorted(f.lstrip('/') for f in self.fs.walk.files(payload.path))

    def payload_oxum(self):
        """
        compute the actual byte and file counts of the payload.

        :return: a 2-tuple of (total bytes, file count)
        """
        total_bytes = 0
        total_files = 0
        for f in self.payload_files():
            total_bytes += self.sizeof(f)
            total_files += 1
        return total_bytes, total_files

    def digest_provider(self):
        """
        return a new DigestProvider for checksumming files in this bag
        """
        return DigestProvider(self.fs)

def open_bag(location):
    """
    A factory function for opening a bag; it returns a ReadOnlyBag
    instance opened for a given bag location.  The location can be a
    directory path or an FS URL.
    """
    if not location:
        raise ValueError("open_bag: empty location string")
    location = str(location)

    if '://' in location:
        name = location.rstrip("/").split("/")[-1]
        try:
            filesys = open_fs(location)
        except fs.errors.CreateFailed as ex:
            raise StructureError("Unable to open bag at %s: %s" % (location, ex))
        return ReadOnlyBag(Path(filesys, "", location.rstrip("/")+"/"), name)

    return ReadOnlyBag(location)
