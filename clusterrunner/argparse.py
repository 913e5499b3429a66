from __future__ import absolute_import, division, print_function

import os


def addArgumentParserBaseFlags(parser, logfileName):
    '''
    Adds the flags shared by every clusterrunner script: config file
    override, state directory and debug logging.

    Provides ALL flags required by the Config class.
    '''
    parser.add_argument(
        "-v",
        dest="verbose",
        help="Increase verbosity (multiple times for more verbose)",
        action="append_const",
        const=1)
    parser.add_argument(
        "-d",
        "--state-dir",
        dest='stateDir',
        metavar="DIR",
        help="Specify state directory for debug logs (default='%(default)s')",
        default=os.getenv('CLUSTERRUNNER_STATE_DIR', "~/.local/share/clusterjob"))
    parser.add_argument("--rc-file", dest="rcFile",
                        help="Specify path to rc-file (default=\"%(default)s\")",
                        default="~/.config/clusterjobrc")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="enable debug output to <state-dir>/log/%s.log" % logfileName)
