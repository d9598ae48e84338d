"""
This module turns an ordinary directory into a bag, in place.

The directory's current contents are moved into a ``data`` payload
subdirectory, after which the payload manifests, bagit.txt, bag-info.txt,
and the tag manifests are written.  Note that a failure part way through
can leave the directory partially transformed (e.g. with its contents
already moved under ``data``); no automatic rollback is attempted.
"""
import os, logging, tempfile
from collections import OrderedDict
from datetime import date
from enum import Enum

from .constants import (BAGIT_VERSION, TAG_FILE_ENCODING, BAGIT_TXT_TAGS,
                        BAGIT_TXT, BAG_INFO_TXT, PAYLOAD_DIR, SOFTWARE_AGENT,
                        DEFAULT_ALGORITHMS)
from .digest import DigestProvider, parse_algorithms
from .manifest import ManifestBuilder, write_tagmanifests
from .tagfile import TagFile
from .exceptions import BagError, BagPermissionError
from .access.bag import open_bag

LOGGER = logging.getLogger(__name__)

class MakeState(Enum):
    """
    the stages of turning a directory into a bag
    """
    START = "start"
    PAYLOAD_RELOCATED = "payload relocated"
    MANIFESTS_WRITTEN = "manifests written"
    TAGS_WRITTEN = "tags written"
    TAGMANIFESTS_WRITTEN = "tagmanifests written"
    DONE = "done"
    FAILED = "failed"

def make_bag(bagdir, algorithms=None, metadata=None, processes=1):
    """
    convert the given directory into a bag, in place.

    :param str bagdir:      the directory to convert
    :param list algorithms: the names of the checksum algorithms to create
                            manifests for (default: sha256 and sha512)
    :param dict metadata:   tags to include in bag-info.txt
    :param int processes:   the maximum number of files to checksum at once
    :return: the new bag, opened read-only
    :rtype: ReadOnlyBag
    """
    mkr = BagMaker(bagdir, algorithms, metadata, processes)
    mkr.make()
    return open_bag(mkr.bagdir)

class BagMaker(object):
    """
    This class collects the operations for turning a directory into a bag.

    The conversion is most easily done by instantiating this class and
    calling make().  That method calls, in sequence, check_permissions(),
    relocate_payload(), write_manifests(), write_bagit_txt(),
    write_bag_info(), and write_tagmanifests(); the state attribute records
    how far the conversion has progressed.

    A BagMaker takes exclusive ownership of its directory while make() runs;
    running two makers against the same directory at the same time is not
    supported.
    """

    def __init__(self, bagdir, algorithms=None, metadata=None, processes=1):
        """
        :param str bagdir:      the directory to convert
        :param list algorithms: the names of the checksum algorithms to create
                                manifests for (default: sha256 and sha512)
        :param dict metadata:   tags to include in bag-info.txt
        :param int processes:   the maximum number of files to checksum at once
        :raises UnsupportedAlgorithm:  if an algorithm name is not supported
        """
        if not algorithms:
            algorithms = DEFAULT_ALGORITHMS
        self.algorithms = parse_algorithms(algorithms)
        if processes < 1:
            raise ValueError("The number of processes must be greater than 0")
        self.processes = processes

        self.metadata = TagFile()
        if metadata:
            self.metadata.update(metadata)

        self.bagdir = os.path.abspath(bagdir)
        self.state = MakeState.START
        self.oxum = None
        self._provider = None

    def make(self):
        """
        convert the directory into a bag.

        :raises BagError:  if the directory does not exist or cannot be
                           converted
        :raises BagPermissionError:  if any file in the directory cannot be
                           read or written; in this case, the directory is
                           left untouched.
        :raises DigestFailed:  if a file could not be checksummed
        """
        if not os.path.isdir(self.bagdir):
            raise BagError("Bag directory %s does not exist" % self.bagdir)
        LOGGER.info("Creating bag for directory %s", self.bagdir)

        try:
            self.check_permissions()
            self.relocate_payload()
            self.write_manifests()
            self.write_bagit_txt()
            self.write_bag_info()
            self.write_tagmanifests()
        except Exception:
            self.state = MakeState.FAILED
            raise

        self.state = MakeState.DONE
        LOGGER.info("Successfully created bag: %s", self.bagdir)

    def check_permissions(self):
        """
        ensure that every file and directory below the bag directory (and the
        directory itself) is readable and writable.  Symbolically linked
        directories are descended into, as they are when the payload is
        checksummed.

        :raises BagPermissionError:  listing every offending path
        """
        unreadable = []
        unwritable = []

        def _check(path):
            if not os.access(path, os.R_OK):
                unreadable.append(path)
            if not os.access(path, os.W_OK):
                unwritable.append(path)

        _check(self.bagdir)
        for dirpath, dirnames, filenames in os.walk(self.bagdir,
                                                    followlinks=True):
            for name in sorted(dirnames) + sorted(filenames):
                _check(os.path.join(dirpath, name))

        if unreadable or unwritable:
            for path in unreadable:
                LOGGER.error("Not readable: %s", path)
            for path in unwritable:
                LOGGER.error("Not writable: %s", path)
            raise BagPermissionError(unreadable, unwritable)

    def relocate_payload(self):
        """
        move all of the directory's current contents (including hidden files)
        into a new ``data`` subdirectory.
        """
        entries = sorted(os.listdir(self.bagdir))
        staging = tempfile.mkdtemp(dir=self.bagdir, prefix=".payload-")
        for name in entries:
            LOGGER.info("Moving %s to data directory", name)
            os.rename(os.path.join(self.bagdir, name),
                      os.path.join(staging, name))
        os.rename(staging, os.path.join(self.bagdir, PAYLOAD_DIR))
        os.chmod(os.path.join(self.bagdir, PAYLOAD_DIR),
                 os.stat(self.bagdir).st_mode)
        self.state = MakeState.PAYLOAD_RELOCATED

    def _get_provider(self):
        if not self._provider:
            self._provider = DigestProvider(self.bagdir)
        return self._provider

    def write_manifests(self):
        """
        checksum the payload and write the payload manifests.  If the payload
        is empty, no manifest files are written (and the resulting bag will
        not pass validation, which requires at least one manifest).
        """
        bldr = ManifestBuilder(self.bagdir, self.algorithms, self.processes,
                               self._get_provider())
        result = bldr.build()
        bldr.write(result)
        self.oxum = result.oxum
        self.state = MakeState.MANIFESTS_WRITTEN

    def write_bagit_txt(self):
        """
        write the bag declaration file, bagit.txt
        """
        tags = TagFile()
        tags["BagIt-Version"] = BAGIT_VERSION
        tags["Tag-File-Character-Encoding"] = TAG_FILE_ENCODING
        tags.write(os.path.join(self.bagdir, BAGIT_TXT), BAGIT_TXT_TAGS)
        LOGGER.info("Created %s", BAGIT_TXT)

    def bag_info(self):
        """
        return the tags that should be written to bag-info.txt:  the metadata
        provided at construction, overridden by the computed Bagging-Date,
        Bag-Software-Agent, and Payload-Oxum values.
        """
        if self.oxum is None:
            raise BagError("bag_info(): payload manifests not yet computed")
        info = TagFile(self.metadata)
        info.update(OrderedDict([
            ("Bagging-Date", date.today().strftime("%Y-%m-%d")),
            ("Bag-Software-Agent", SOFTWARE_AGENT),
            ("Payload-Oxum", self.oxum)
        ]))
        return info

    def write_bag_info(self):
        """
        write the bag metadata file, bag-info.txt, with its tags sorted
        """
        self.bag_info().write(os.path.join(self.bagdir, BAG_INFO_TXT))
        LOGGER.info("Created %s", BAG_INFO_TXT)
        self.state = MakeState.TAGS_WRITTEN

    def write_tagmanifests(self):
        """
        write a tag manifest for each of the configured algorithms
        """
        write_tagmanifests(self.bagdir, self.algorithms, self._get_provider())
        self.state = MakeState.TAGMANIFESTS_WRITTEN