from __future__ import absolute_import, division, print_function

import datetime
import errno
import logging
import os
import tempfile
import time

import chardet
import dateutil.tz
from six import text_type
from six.moves import map

SPACER_EACH = "========================================"
SPACER = SPACER_EACH + SPACER_EACH
TAIL_BLOCK_SIZE = 8192

LOG = logging.getLogger(__name__)


def strForEach(value):
    try:
        return text_type(value)
    except (UnicodeDecodeError, UnicodeEncodeError):
        LOG.debug("%r", value, exc_info=1)
        return '{!r}'.format(value)


def sprint(*args, **kwargs):
    """sprint: "safe" print - ignore IOError"""
    try:
        print(*list(map(strForEach, args)), **kwargs)
    except IOError:
        LOG.debug("sprint ignore IOError", exc_info=1)
    except (UnicodeEncodeError, UnicodeDecodeError):
        print('codec error', repr(args))
        LOG.debug("%r", args, exc_info=1)


def utcNow():
    return datetime.datetime.now(dateutil.tz.tzutc())


def autoDecode(byteArray):
    if not byteArray:
        return u""
    detected = chardet.detect(byteArray)
    encoding = detected['encoding']
    if not encoding or detected['confidence'] < 0.5:  # very arbitrary
        encoding = 'utf-8'
    return byteArray.decode(encoding, errors='replace')


def shellQuote(value):
    """
    Single-quote value for sh, even when it has no special characters.

    Unlike shlex.quote, the result is always a quoted word, so a quoted
    prefix can be joined to an unquoted expansion like '/dir/'.${JOBID}.
    """
    return "'" + str(value).replace("'", "'\"'\"'") + "'"


def tryDelete(path, log=LOG):
    """
    Remove path if it exists. Returns True if the path is gone afterwards.

    A missing file is not an error; any other failure is logged and swallowed.
    """
    if not path:
        return True
    try:
        os.remove(path)
        log.debug("deleted %s", path)
    except OSError as err:
        if err.errno == errno.ENOENT:
            return True
        log.warning("Unable to delete %s: %s", path, err)
        return False
    return True


def createNewFile(path):
    """Create an empty file unless it already exists."""
    try:
        fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
    except OSError as err:
        if err.errno == errno.EEXIST:
            return False
        raise
    os.close(fd)
    return True


def makeDirs(dirNames):
    for dirName in dirNames:
        os.makedirs(dirName, exist_ok=True)


def writeTempFile(content, suffix, dirName=None):
    (fd, path) = tempfile.mkstemp(suffix=suffix, dir=dirName)
    with os.fdopen(fd, 'w', encoding='utf-8') as fp:
        fp.write(content)
    return path


def waitForFile(path, timeout, sleep=time.sleep, interval=1.0):
    """Poll for path to exist for up to timeout seconds."""
    waited = 0.0
    while not os.path.exists(path):
        if waited >= timeout:
            return False
        sleep(interval)
        waited += interval
    return True


def tail(path, numLines):
    """Return the last numLines lines of path, decoded."""
    if numLines <= 0:
        return []
    with open(path, 'rb') as fp:
        fp.seek(0, os.SEEK_END)
        end = fp.tell()
        data = b""
        # one extra line so a partial first line is dropped
        while end > 0 and data.count(b"\n") <= numLines:
            start = max(0, end - TAIL_BLOCK_SIZE)
            fp.seek(start)
            data = fp.read(end - start) + data
            end = start
    return autoDecode(data).splitlines()[-numLines:]
