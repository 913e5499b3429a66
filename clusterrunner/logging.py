from __future__ import absolute_import, division, print_function

import logging
import os
import sys


def getLogger(name):
    return logging.getLogger(name)


def setup(logDir, debugLogFileName, debug=False):
    """
    Configure the root logger. With debug=True everything goes to
    <logDir>/<debugLogFileName>.log; a string names the debug log directly.
    Otherwise only errors reach stderr.
    """
    fmt = (
        '+%(process)-6d %(levelname)-9s '
        '%(name)-24s %(filename)16s:%(lineno)-5d '
        '[%(asctime)s] %(message)s')
    if debug:
        if isinstance(debug, str):
            logFileName = os.path.expanduser(debug)
        else:
            logFileName = os.path.join(logDir, debugLogFileName + ".log")
        logging.basicConfig(
            filename=logFileName,
            level=logging.DEBUG,
            format=fmt)
    else:
        logging.basicConfig(stream=sys.stderr, level=logging.ERROR, format=fmt)
