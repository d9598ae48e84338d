"""
Reading and writing of tag files--the ``Key: value`` metadata files such as
bagit.txt and bag-info.txt.

A line that starts with whitespace continues the value of the tag on the
previous line; its full content (leading whitespace included) is appended to
that value.  When written, tags appear one per line, sorted by name unless
an explicit order is given.
"""
import io, re, logging
from collections import OrderedDict

from .exceptions import MalformedTagLine

LOGGER = logging.getLogger(__name__)

_tagre = re.compile(r'^([^:\s][^:]*):(.*)$')
_newlinere = re.compile(r'[\r\n]')

class TagFile(OrderedDict):
    """
    an ordered mapping of tag names to values.  Tag names are case-sensitive
    and unique.  Values are stored as strings with any carriage returns or
    line feeds removed.
    """

    def __setitem__(self, key, value):
        if not isinstance(key, str) or not key or key != key.strip() or \
           ':' in key or _newlinere.search(key):
            raise ValueError("Illegal tag name: %r" % (key,))
        super(TagFile, self).__setitem__(key, _newlinere.sub('', str(value)))

    def update(self, *args, **kw):
        # OrderedDict.update() bypasses __setitem__ in some implementations
        for key, value in OrderedDict(*args, **kw).items():
            self[key] = value

    def serialize(self, order=None):
        """
        return the contents of this mapping formatted as a tag file.

        :param list order:  the tag names in the order they should be written.
                            If None, the tags are sorted by name.
        """
        return serialize_tags(self, order)

    def write(self, filepath, order=None, encoding="utf-8"):
        """
        write the tags to a file at the given path.
        """
        write_tag_file(filepath, self, order, encoding)

def parse_tags(text, source=None):
    """
    parse the contents of a tag file into a TagFile.  Blank lines are
    skipped.  If a tag name appears more than once, the first value is kept
    and a warning is logged.

    :param str text:    the contents of the tag file
    :param str source:  the name of the file being parsed (used in messages)
    :rtype: TagFile
    :raises MalformedTagLine:  if a non-blank line is neither a ``name: value``
                               line nor a continuation of an open tag
    """
    out = TagFile()
    name = None
    value = None

    def _store(name, value):
        if name in out:
            LOGGER.warning("%s defines %s multiple times; using first value",
                           source or "tag file", name)
            return
        out[name] = value

    for line in text.split('\n'):
        if line.endswith('\r'):
            line = line[:-1]
        if not line.strip():
            continue

        if line[0].isspace():
            if name is None:
                raise MalformedTagLine(line, source)
            value += line
            continue

        m = _tagre.match(line)
        if not m:
            raise MalformedTagLine(line, source)

        if name is not None:
            _store(name, value)
        name = m.group(1).rstrip()
        value = m.group(2)
        if value.startswith(' '):
            value = value[1:]

    if name is not None:
        _store(name, value)

    return out

def serialize_tags(tags, order=None):
    """
    format a mapping of tag names to values as the contents of a tag file:
    one ``Name: value`` line per tag, each ending with a newline.

    :param dict tags:   the tags to format
    :param list order:  the tag names in the order they should be written.
                        If None, the tags are sorted by name.
    """
    if order is None:
        order = sorted(tags.keys())
    return "".join("%s: %s\n" % (name, tags[name]) for name in order)

def load_tag_file(filepath, encoding="utf-8"):
    """
    read and parse the tag file at the given path on local disk.

    :rtype: TagFile
    """
    with io.open(filepath, encoding=encoding, newline='') as fd:
        return parse_tags(fd.read(), filepath)

def write_tag_file(filepath, tags, order=None, encoding="utf-8"):
    """
    write a tag file to the given path on local disk.
    """
    with io.open(filepath, 'w', encoding=encoding, newline='\n') as fd:
        fd.write(serialize_tags(tags, order))
