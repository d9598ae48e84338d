"""
This module provides the validator implementation for the BagIt
specification.

Validation proceeds through a series of checks, stopping after the first one
that reports an error:

  1. Structure:     bagit.txt, the data directory, and at least one payload
                    manifest exist
  2. BagitTxt:      bagit.txt is well-formed and has its required tags
  3. Oxum:          the payload's byte and file counts match the Payload-Oxum
                    in bag-info.txt (if present)
  4. Completeness:  every file listed in a manifest exists and every payload
                    file is listed in a manifest
  5. Checksums:     every file's checksums match those in the manifests and
                    tag manifests

Fast validation stops after the Oxum check; completeness-only validation
stops after the Completeness check.  Within a check, all violations are
collected and reported together.
"""
import re, codecs, logging
from collections import OrderedDict
from enum import Enum

import fs.errors

from .base import Validator, ValidationResults, ERROR, WARN, REC, PROB
from ..access.bag import open_bag, ReadOnlyBag
from ..constants import (BAGIT_TXT, BAG_INFO_TXT, PAYLOAD_DIR,
                         MIN_BAGIT_VERSION, MAX_BAGIT_VERSION, Version)
from ..digest import Algorithm, map_files
from ..pathcodec import is_dangerous
from ..exceptions import (BagError, StructureError, BagitTxtError,
                          MalformedOxum, MissingOxum, OxumMismatch, MissingFile,
                          UnexpectedFile, ChecksumMismatch, ConflictingEntry,
                          DangerousPath, DigestFailed, UnsupportedAlgorithm)

LOGGER = logging.getLogger(__name__)

_versionre = re.compile(r'^\d+\.\d+$')
_oxumre = re.compile(r'^(\d+)\.(\d+)$')

STRUCTURE = "Structure"
BAGIT_TXT_CHECK = "BagitTxt"
OXUM = "Oxum"
COMPLETENESS = "Completeness"
CHECKSUMS = "Checksums"

class ValidationMode(Enum):
    """
    the extent of validation to apply to a bag
    """
    FULL = "full"
    FAST = "fast"
    COMPLETENESS = "completeness-only"

def validate_bag(bagpath, mode=ValidationMode.FULL, processes=1, want=PROB):
    """
    validate a bag, returning the results.

    :param str bagpath:  the path to the bag's root directory
    :param ValidationMode mode:  the extent of validation to apply
    :param int processes:  the maximum number of files to checksum at once
    :param int want: bit-wise and-ed codes indicating which types of
                     test results are desired.
    :rtype: ValidationResults
    """
    return BagValidator(bagpath, mode, processes).validate(want)

def validate(bagpath, mode=ValidationMode.FULL, processes=1, want=ERROR):
    """
    validate a bag, raising an exception if it is not valid.  By default,
    only errors (not warnings) are considered.

    :raise BagValidationError:  if validation errors are detected
    """
    return BagValidator(bagpath, mode, processes).ensure_valid(want)

class BagValidator(Validator):
    """
    A validator that tests whether a bag on disk complies with the BagIt
    specification and with its own manifests.
    """

    def __init__(self, bagpath, mode=ValidationMode.FULL, processes=1):
        """
        initialize the validator for the bag with a given path.

        :param bagpath:  the target bag, either a ReadOnlyBag or the location
                         of its root directory
        :param ValidationMode mode:  the extent of validation to apply
        :param int processes:  the maximum number of files to checksum at once
        """
        if not isinstance(bagpath, ReadOnlyBag):
            bagpath = open_bag(bagpath)
        super(BagValidator, self).__init__(str(bagpath))
        self.bag = bagpath
        self.mode = ValidationMode(mode)
        if processes < 1:
            raise ValueError("The number of processes must be greater than 0")
        self.processes = processes
        self._entries = None

    def validate(self, want=PROB, results=None):
        """
        run the checks appropriate to this validator's mode.

        :param want    int:  bit-wise and-ed codes indicating which types of
                             test results are desired.
        :param results ValidationResults: a ValidationResults to add result
                             information to; if provided, this instance will
                             be the one returned by this method.
        :rtype: ValidationResults
        """
        if not results:
            results = ValidationResults(self.target, want)
        self._entries = None

        LOGGER.info("Validating bag: %s", self.bag)
        if not self.validate_structure(want, results):
            return results
        if not self.validate_bagit_txt(want, results):
            return results
        if not self.validate_oxum(want, results):
            return results
        if self.mode == ValidationMode.FAST:
            LOGGER.info("%s valid according to Payload-Oxum", self.bag)
            return results

        if not self.validate_completeness(want, results):
            return results
        if self.mode == ValidationMode.COMPLETENESS:
            LOGGER.info("%s is complete and valid according to Payload-Oxum",
                        self.bag)
            return results

        if self.validate_checksums(want, results):
            LOGGER.info("%s is valid", self.bag)
        return results

    def _fail(self, results, issue, error, comments=None, type=ERROR):
        LOGGER.warning("%s: %s", self.bag, str(error))
        if not comments:
            comments = [str(error)]
        results._add_issue(issue, type, False, comments, error)

    def _check(self, results, checkfunc, want):
        # run a check function and return True if it added no failed ERRORs
        before = results.count_failed(ERROR)
        checkfunc(results, want)
        return results.count_failed(ERROR) == before

    def validate_structure(self, want=PROB, results=None):
        """
        check that the bag has a bagit.txt file, a payload directory, and at
        least one payload manifest.  When recommendations are wanted, the
        presence of a tag manifest is also checked.  Return True if all pass.
        """
        if not results:
            results = ValidationResults(self.target, want)
        return self._check(results, self._validate_structure, want)

    def _validate_structure(self, results, want):
        t = results._issue(STRUCTURE, "Bag must contain a bagit.txt file")
        if self.bag.isfile(BAGIT_TXT):
            results._err(t, True)
        else:
            self._fail(results, t,
                       StructureError("Missing required file: " + BAGIT_TXT))

        t = results._issue(STRUCTURE, "Bag must contain a payload directory, "+
                           PAYLOAD_DIR)
        if self.bag.isdir(PAYLOAD_DIR):
            results._err(t, True)
        else:
            self._fail(results, t,
                       StructureError("Missing required directory: " +
                                      PAYLOAD_DIR))

        t = results._issue(STRUCTURE,
                           "Bag must contain at least one payload manifest")
        if self.bag.manifest_files():
            results._err(t, True)
        else:
            self._fail(results, t, StructureError("No manifest files found"))

        if want & REC:
            t = results._issue(STRUCTURE,
                               "Bag should contain at least one tag manifest")
            if self.bag.tagmanifest_files():
                results._rec(t, True)
            else:
                results._rec(t, False, "No tag manifest files found")

    def validate_bagit_txt(self, want=PROB, results=None):
        """
        check that bagit.txt has no byte-order mark and declares the BagIt
        version and tag file encoding.  Return True if no errors are found.
        """
        if not results:
            results = ValidationResults(self.target, want)
        return self._check(results, self._validate_bagit_txt,
                           want)

    def _validate_bagit_txt(self, results, want):
        t = results._issue(BAGIT_TXT_CHECK,
                           "bagit.txt must not contain a byte-order mark")
        if self.bag.read_bytes(BAGIT_TXT, 3).startswith(codecs.BOM_UTF8):
            self._fail(results, t,
                BagitTxtError("bagit.txt must not contain a byte-order mark"))
            return
        results._err(t, True)

        t = results._issue(BAGIT_TXT_CHECK, "bagit.txt must be a legal tag file")
        try:
            tags = self.bag.bagit_tags()
        except (BagError, UnicodeDecodeError) as ex:
            self._fail(results, t, BagitTxtError("Unable to parse bagit.txt: " +
                                                 str(ex)))
            return
        results._err(t, True)

        t = results._issue(BAGIT_TXT_CHECK,
                           "bagit.txt must include the BagIt-Version tag")
        version = tags.get("BagIt-Version")
        if version is None:
            self._fail(results, t, BagitTxtError(
                "Missing required tag in bagit.txt: BagIt-Version",
                "BagIt-Version"))
        else:
            results._err(t, True)

            t = results._issue(BAGIT_TXT_CHECK,
                          "BagIt-Version must be of the form MAJOR.MINOR")
            if _versionre.match(version):
                results._err(t, True)

                if want & WARN:
                    t = results._issue(BAGIT_TXT_CHECK,
                                       "BagIt-Version should be a known version")
                    if Version(MIN_BAGIT_VERSION) <= Version(version) <= \
                       Version(MAX_BAGIT_VERSION):
                        results._warn(t, True)
                    else:
                        self._fail(results, t, BagitTxtError(
                            "Unrecognized BagIt version: " + version,
                            "BagIt-Version"), type=WARN)
            else:
                self._fail(results, t, BagitTxtError(
                    "Invalid BagIt version: " + version, "BagIt-Version"))

        t = results._issue(BAGIT_TXT_CHECK,
                   "bagit.txt must include the Tag-File-Character-Encoding tag")
        encoding = tags.get("Tag-File-Character-Encoding")
        if encoding is None:
            self._fail(results, t, BagitTxtError(
                "Missing required tag in bagit.txt: Tag-File-Character-Encoding",
                "Tag-File-Character-Encoding"))
        else:
            results._err(t, True)

            if want & WARN:
                t = results._issue(BAGIT_TXT_CHECK,
                                   "Tag files should be encoded in UTF-8")
                if encoding.strip().upper() in ("UTF-8", "UTF8"):
                    results._warn(t, True)
                else:
                    self._fail(results, t, BagitTxtError(
                        "Tag files will be read as UTF-8, not " + encoding,
                        "Tag-File-Character-Encoding"), type=WARN)

    def validate_oxum(self, want=PROB, results=None):
        """
        compare the Payload-Oxum in bag-info.txt with the actual payload.
        In fast mode, the absence of a Payload-Oxum is an error; otherwise,
        the check passes trivially without it.  Return True if no errors are
        found.
        """
        if not results:
            results = ValidationResults(self.target, want)
        return self._check(results, self._validate_oxum, want)

    def _validate_oxum(self, results, want):
        t = results._issue(OXUM,
                  "Payload-Oxum must match the byte and file counts of the payload")
        try:
            info = self.bag.info()
        except (BagError, UnicodeDecodeError) as ex:
            err = ex
            if not isinstance(ex, BagError):
                err = BagError("Unable to read %s: %s" % (BAG_INFO_TXT, str(ex)))
            self._fail(results, t, err)
            return

        oxum = info and info.get("Payload-Oxum")
        if not oxum:
            if self.mode == ValidationMode.FAST:
                self._fail(results, t, MissingOxum())
            else:
                LOGGER.info("No Payload-Oxum found; skipping Payload-Oxum "
                            "validation")
                results._err(t, True, "No Payload-Oxum available")
            return

        m = _oxumre.match(oxum.strip())
        if not m:
            self._fail(results, t, MalformedOxum(oxum))
            return

        expected_bytes, expected_files = int(m.group(1)), int(m.group(2))
        found_bytes, found_files = self.bag.payload_oxum()
        if expected_bytes != found_bytes or expected_files != found_files:
            self._fail(results, t, OxumMismatch(expected_bytes, expected_files,
                                                found_bytes, found_files))
            return

        LOGGER.info("Payload-Oxum validation passed")
        results._err(t, True)

    def _read_manifests(self, filenames, results, want):
        # parse a set of manifests, recording problems with their content,
        # and return the safe entries found in them.
        out = []
        for filename in filenames:
            try:
                entries, invalid = self.bag.read_manifest(filename)
            except (UnicodeDecodeError, fs.errors.FSError) as ex:
                t = results._issue(filename, "Manifest must be readable")
                self._fail(results, t, StructureError(
                    "Unable to read %s: %s" % (filename, str(ex))))
                continue

            if invalid and (want & WARN):
                t = results._issue(filename,
                                   "Manifest lines should be well-formed")
                results._warn(t, False,
                              ["Invalid entry: " + line for line in invalid])

            seen = OrderedDict()
            for entry in entries:
                if is_dangerous(entry.path):
                    t = results._issue(filename,
                                       "Manifest paths must be within the bag")
                    self._fail(results, t, DangerousPath(entry.path, filename))
                    continue

                if entry.path in seen:
                    first = seen[entry.path]
                    if first.checksum == entry.checksum:
                        if want & WARN:
                            t = results._issue(filename,
                                       "Files should be listed only once")
                            results._warn(t, False,
                                          entry.path + " is listed multiple times")
                    else:
                        t = results._issue(filename,
                                   "Files must not be listed with conflicting "
                                   "checksums")
                        self._fail(results, t, ConflictingEntry(
                            entry.path, filename, first.checksum,
                            entry.checksum))
                    continue

                seen[entry.path] = entry
                out.append(entry)

        return out

    def _payload_entries(self, results, want):
        if self._entries is None:
            self._entries = self._read_manifests(self.bag.manifest_files(),
                                                 results, want)
        return self._entries

    def validate_completeness(self, want=PROB, results=None):
        """
        check that every file listed in the payload manifests exists and that
        every file in the payload directory is listed.  Return True if no
        errors are found.
        """
        if not results:
            results = ValidationResults(self.target, want)
        return self._check(results, self._validate_completeness,
                           want)

    def _validate_completeness(self, results, want):
        before = results.count_failed(ERROR)
        listed = OrderedDict()
        for entry in self._payload_entries(results, want):
            listed.setdefault(entry.path, entry.source)

        for path in sorted(listed.keys()):
            if not self.bag.isfile(path):
                t = results._issue(COMPLETENESS,
                                   "Every file listed in a manifest must exist")
                self._fail(results, t, MissingFile(path, listed[path]))

        for path in self.bag.payload_files():
            if path not in listed:
                t = results._issue(COMPLETENESS,
                       "Every payload file must be listed in a manifest")
                self._fail(results, t, UnexpectedFile(path))

        if results.count_failed(ERROR) == before:
            LOGGER.info("Completeness validation passed")
            t = results._issue(COMPLETENESS, "Bag payload must be complete")
            results._err(t, True)

    def validate_checksums(self, want=PROB, results=None):
        """
        recompute the checksums of every file listed in the bag's manifests
        and tag manifests, comparing them to the recorded values.  Return
        True if no errors are found.
        """
        if not results:
            results = ValidationResults(self.target, want)
        return self._check(results, self._validate_checksums, want)

    def _validate_checksums(self, results, want):
        before = results.count_failed(ERROR)

        entries = list(self._payload_entries(results, want))
        entries += self._read_manifests(self.bag.tagmanifest_files(),
                                        results, want)

        # group the expected values by file
        byfile = OrderedDict()
        badalgs = set()
        for entry in entries:
            try:
                alg = Algorithm.parse(entry.algorithm)
            except UnsupportedAlgorithm as ex:
                if entry.source not in badalgs:
                    badalgs.add(entry.source)
                    t = results._issue(CHECKSUMS,
                                       "Manifest algorithms must be supported")
                    self._fail(results, t, ex, ["%s: %s" % (entry.source, ex)])
                continue
            byfile.setdefault(entry.path, []).append((alg, entry))

        present = []
        for path, expected in byfile.items():
            if self.bag.isfile(path):
                present.append(path)
            else:
                for alg, entry in expected:
                    t = results._issue(CHECKSUMS,
                                       "Every file listed in a manifest must exist")
                    self._fail(results, t, MissingFile(path, entry.source))

        provider = self.bag.digest_provider()

        def _calc(path):
            algs = []
            for alg, entry in byfile[path]:
                if alg not in algs:
                    algs.append(alg)
            LOGGER.debug("Verifying checksum for file %s", path)
            try:
                return path, provider.digests(path, algs)
            except DigestFailed as ex:
                return path, ex

        try:
            computed = map_files(_calc, present, self.processes)
        except Exception:
            LOGGER.exception("Unable to calculate file hashes for %s", self.bag)
            raise

        for path, digests in computed:
            if isinstance(digests, DigestFailed):
                t = results._issue(CHECKSUMS,
                                   "Every file listed in a manifest must exist")
                self._fail(results, t, MissingFile(path, byfile[path][0][1].source,
                                                   digests.reason))
                continue

            for alg, entry in byfile[path]:
                if digests[alg] != entry.checksum:
                    t = results._issue(CHECKSUMS,
                                       "File checksums must match the manifest")
                    self._fail(results, t, ChecksumMismatch(path, str(alg),
                                                            entry.checksum,
                                                            digests[alg]))

        if results.count_failed(ERROR) == before:
            LOGGER.info("Checksum validation passed")
            t = results._issue(CHECKSUMS,
                               "File checksums must match the manifests")
            results._err(t, True)
