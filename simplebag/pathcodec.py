"""
Functions for encoding file paths as they appear in manifest files and for
recognizing paths that would reach outside of a bag.

Only carriage returns and line feeds are escaped (as ``%0D`` and ``%0A``);
a literal ``%`` in a filename is written as-is.
"""
import re

from .exceptions import DangerousPath

_encodings = (("\r", "%0D"), ("\n", "%0A"))
_decodere = re.compile(r'%0[DA]')
_decodemap = {"%0D": "\r", "%0A": "\n"}

def encode_path(path):
    """
    return the form of a bag-relative path as it should be written into a
    manifest file.
    """
    for char, esc in _encodings:
        path = path.replace(char, esc)
    return path

def decode_path(path):
    """
    return the path represented by a path string read from a manifest file.
    """
    return _decodere.sub(lambda m: _decodemap[m.group(0)], path)

def is_dangerous(path):
    """
    return True if the given relative path could point outside of the
    directory it is interpreted against:  that is, if it is absolute, if
    any of its segments is ``..``, or if it starts with a ``~`` home-directory
    reference.
    """
    if not path:
        return False
    if path.startswith('/') or path.startswith('\\') or path.startswith('~'):
        return True
    if re.match(r'^[A-Za-z]:', path):
        return True
    return '..' in re.split(r'[/\\]', path)

def check_path(path, source=None):
    """
    return the given path unchanged if it is safe; otherwise raise a
    DangerousPath exception.

    :param str path:    the relative path to check
    :param str source:  the name of the file the path came from (for the
                        exception message)
    :raises DangerousPath:  if :py:func:`is_dangerous` returns True for path
    """
    if is_dangerous(path):
        raise DangerousPath(path, source)
    return path
