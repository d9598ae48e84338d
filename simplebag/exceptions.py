"""
exceptions that can be raised while making, reading, or validating a bag.

Errors that abort an operation (e.g. :py:class:`DigestFailed`) are raised.
The :py:class:`ValidationViolation` subclasses describe individual problems
found in a bag; a validator collects these rather than raising them and
reports them together via a :py:class:`BagValidationError`.
"""

class BagError(Exception):
    """
    a general exception while working with a bag.
    """
    def __init__(self, message, details=None):
        """
        :param str message:   the exception's message
        :param list details:  objects (usually other BagError instances) that
                              provide more detail on the failure
        """
        super(BagError, self).__init__(message)
        self.message = message
        self.details = list(details or [])

    def __str__(self):
        return self.message

class UsageError(BagError):
    """
    an exception indicating that an operation was requested with illegal
    arguments or option combinations.
    """
    pass

class BagPermissionError(BagError):
    """
    an exception indicating that some files or directories in a directory to
    be bagged cannot be read or written.
    """
    def __init__(self, unreadable=None, unwritable=None, message=None):
        """
        :param list unreadable:  paths that are not readable
        :param list unwritable:  paths that are not writable
        """
        self.unreadable = list(unreadable or [])
        self.unwritable = list(unwritable or [])
        if not message:
            parts = []
            if self.unreadable:
                parts.append("not readable: " + ", ".join(self.unreadable))
            if self.unwritable:
                parts.append("not writable: " + ", ".join(self.unwritable))
            message = "Insufficient permissions to make bag (" + \
                      "; ".join(parts) + ")"
        super(BagPermissionError, self).__init__(message,
                                                 self.unreadable+self.unwritable)

class DangerousPath(BagError):
    """
    an exception indicating that a path would reference a location outside
    of the bag (e.g. ``../../etc/passwd`` or ``~/.bashrc``).
    """
    def __init__(self, path, source=None, message=None):
        """
        :param str path:    the offending path
        :param str source:  the file (e.g. a manifest) where the path was found
        """
        self.path = path
        self.source = source
        if not message:
            message = 'Path "%s" is unsafe' % path
            if source:
                message = 'Path "%s" in "%s" is unsafe' % (path, source)
        super(DangerousPath, self).__init__(message)

class UnsupportedAlgorithm(BagError, ValueError):
    """
    an exception indicating that a checksum algorithm name is not recognized
    """
    def __init__(self, algorithm, message=None):
        self.algorithm = algorithm
        if not message:
            message = "Unsupported checksum algorithm: %s" % algorithm
        super(UnsupportedAlgorithm, self).__init__(message)

class DigestFailed(BagError):
    """
    an exception indicating that a file's digest could not be computed because
    the file could not be read.
    """
    def __init__(self, filename, algorithm, reason=None):
        """
        :param str filename:   the path to the file that could not be read
        :param str algorithm:  the name of the algorithm being computed
        :param str reason:     an explanation of the I/O failure
        """
        self.filename = filename
        self.algorithm = algorithm
        self.reason = reason
        message = "Failed to calculate %s checksum for %s" % (algorithm, filename)
        if reason:
            message += ": %s" % reason
        super(DigestFailed, self).__init__(message)

class MalformedTagLine(BagError, ValueError):
    """
    an exception indicating that a line in a tag file cannot be parsed
    """
    def __init__(self, line, source=None):
        """
        :param str line:    the offending line
        :param str source:  the name of the tag file being parsed
        """
        self.line = line
        self.source = source
        message = "Invalid tag line"
        if source:
            message += " in %s" % source
        message += ": %r" % line
        super(MalformedTagLine, self).__init__(message)

class BagValidationError(BagError):
    """
    An exception indicating that a bag failed validation.  It carries along
    all of the result details as a ValidationResults instance ("results");
    the details attribute lists the violations that were found.
    """
    def __init__(self, results):
        self.results = results

        failed = results.failed(results.want)
        if len(failed) == 0:
            # shouldn't happen
            msg = "Unknown bag validation failure"
        elif len(failed) == 1:
            msg = failed[0].summary
        else:
            msg = "{0} validation errors detected".format(len(failed))

        details = [i.error or i.description for i in failed]
        super(BagValidationError, self).__init__(msg, details)

    def __str__(self):
        failed = self.results.failed(self.results.want)
        if len(failed) < 2:
            return self.message

        out = self.message + ":"
        for f in failed:
            out += "\n * " + f.description
        return out

class ValidationViolation(BagError):
    """
    a problem found while validating a bag.
    """
    pass

class StructureError(ValidationViolation):
    """
    the bag is missing bagit.txt, its payload directory, or its manifests
    """
    pass

class BagitTxtError(ValidationViolation):
    """
    bagit.txt is malformed or is missing a required tag
    """
    def __init__(self, message, tag=None):
        """
        :param str tag:  the name of the missing or invalid tag, if applicable
        """
        self.tag = tag
        super(BagitTxtError, self).__init__(message)

class MalformedOxum(ValidationViolation):
    """
    the Payload-Oxum value in bag-info.txt cannot be parsed
    """
    def __init__(self, oxum, message=None):
        self.oxum = oxum
        if not message:
            message = "Malformed Payload-Oxum value: %s" % oxum
        super(MalformedOxum, self).__init__(message)

class MissingOxum(MalformedOxum):
    """
    no Payload-Oxum value is available though one is required
    """
    def __init__(self, message=None):
        if not message:
            message = "Fast validation requires Payload-Oxum in bag-info.txt"
        super(MissingOxum, self).__init__(None, message)

class OxumMismatch(ValidationViolation):
    """
    the payload's byte and file counts do not match its Payload-Oxum
    """
    def __init__(self, expected_bytes, expected_files, found_bytes, found_files):
        self.expected_bytes = expected_bytes
        self.expected_files = expected_files
        self.found_bytes = found_bytes
        self.found_files = found_files
        message = ("Payload-Oxum validation failed. Expected %d files and %d "
                   "bytes but found %d files and %d bytes") % \
                  (expected_files, expected_bytes, found_files, found_bytes)
        super(OxumMismatch, self).__init__(message)

class ManifestErrorDetail(ValidationViolation):
    """
    a violation associated with a particular file listed in (or missing
    from) a manifest.
    """
    def __init__(self, path, message):
        self.path = path
        super(ManifestErrorDetail, self).__init__(message)

class MissingFile(ManifestErrorDetail):
    """
    a file listed in a manifest does not exist in the bag
    """
    def __init__(self, path, manifest=None, reason=None):
        self.manifest = manifest
        self.reason = reason
        message = "%s exists in manifest but was not found on filesystem" % path
        if manifest:
            message = "%s exists in %s but was not found on filesystem" % \
                      (path, manifest)
        if reason:
            message += " (%s)" % reason
        super(MissingFile, self).__init__(path, message)

class UnexpectedFile(ManifestErrorDetail):
    """
    a payload file is not listed in any manifest
    """
    def __init__(self, path):
        super(UnexpectedFile, self).__init__(
            path, "%s exists on filesystem but is not in the manifest" % path)

class ChecksumMismatch(ManifestErrorDetail):
    """
    a file's recomputed checksum does not match the value in its manifest
    """
    def __init__(self, path, algorithm, expected, found):
        self.algorithm = algorithm
        self.expected = expected
        self.found = found
        super(ChecksumMismatch, self).__init__(
            path, '%s %s validation failed: expected="%s" found="%s"' %
                  (path, algorithm, expected, found))

class ConflictingEntry(ManifestErrorDetail):
    """
    a manifest lists the same file more than once with different checksums
    """
    def __init__(self, path, manifest, first, second):
        self.manifest = manifest
        self.values = (first, second)
        super(ConflictingEntry, self).__init__(
            path, "%s lists %s multiple times with conflicting values" %
                  (manifest, path))
