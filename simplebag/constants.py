"""
Common data about the bags produced and checked by this package.
"""
VERSION = "1.0.1"
PROJECT_URL = "https://github.com/simplebag/simplebag"

BAGIT_VERSION = "0.97"
TAG_FILE_ENCODING = "UTF-8"

# the bagit.txt tags, in the order they are written
BAGIT_TXT_TAGS = ("BagIt-Version", "Tag-File-Character-Encoding")

# the BagIt versions this package knows how to read
MIN_BAGIT_VERSION = "0.93"
MAX_BAGIT_VERSION = "1.0"

PAYLOAD_DIR = "data"
BAGIT_TXT = "bagit.txt"
BAG_INFO_TXT = "bag-info.txt"

HASH_BLOCK_SIZE = 512 * 1024

DEFAULT_ALGORITHMS = ("sha256", "sha512")

SOFTWARE_AGENT = "simplebag v{0} <{1}>".format(VERSION, PROJECT_URL)

# bag-info.txt keys that are always computed when a bag is made
COMPUTED_INFO_TAGS = ("Bagging-Date", "Bag-Software-Agent", "Payload-Oxum")

RECOGNIZED_INFO_TAGS = (
    "Source-Organization",
    "Organization-Address",
    "Contact-Name",
    "Contact-Phone",
    "Contact-Email",
    "External-Description",
    "External-Identifier",
    "Bag-Size",
    "Bag-Group-Identifier",
    "Bag-Count",
    "Internal-Sender-Identifier",
    "Internal-Sender-Description",
    "Bagit-Profile-Identifier",
)

def _2int(sint):
    try:
        return int(sint)
    except ValueError:
        return -1

class Version(object):
    """
    a version class that can facilitate comparisons
    """

    def __init__(self, vers):
        """
        convert a version string to a Version instance
        """
        if isinstance(vers, str):
            self._vs = vers
            self.fields = [_2int(v) for v in self._vs.split('.')]
        elif isinstance(vers, tuple):
            self._vs = ".".join([str(v) for v in vers])
            self.fields = list(vers)
        else:
            raise TypeError("Input version is not str or tuple: " + str(vers))

    def __str__(self):
        return self._vs

    def __eq__(self, other):
        if not isinstance(other, Version):
            other = Version(other)
        return self.fields == other.fields

    def __lt__(self, other):
        if not isinstance(other, Version):
            other = Version(other)
        return self.fields < other.fields

    def __le__(self, other):
        if not isinstance(other, Version):
            other = Version(other)
        return self < other or self == other

    def __ge__(self, other):
        return not (self < other)
    def __gt__(self, other):
        return not self.__le__(other)
    def __ne__(self, other):
        return not (self == other)

    __hash__ = None
