from __future__ import absolute_import, division, print_function

from dataclasses import dataclass
import os
from typing import Optional

import six

RC_FILE_HELP = """\
Sample rcfile:
    [submit]
    backend = lsf|sge|local  # default=lsf
    attempts = 5             # submission attempts before giving up
    delay = 10               # seconds between submission attempts
    name length = 1000       # job names are the truncated command line
    script dir = /shared/tmp # must be visible from the execution hosts
    [status]
    log wait = 120           # seconds to wait for the log of a failed job
    tail lines = 100
    poll interval = 30
    [scheduler]
    project = my-project
    queue = normal
"""


class ConfigEnum(object):
    __slots__ = (
        'defaultName',
        '_enumVals',
    )

    def __init__(self, default, **enumVals):
        self._enumVals = enumVals
        assert default in enumVals
        self.defaultName = default
        for enumName in enumVals:
            assert enumName not in self.__slots__

    def names(self):
        return six.iterkeys(self._enumVals)

    def values(self):
        return six.itervalues(self._enumVals)

    @property
    def defaultVal(self):
        return self._enumVals[self.defaultName]

    def __getattr__(self, attr):
        assert attr != '_enumVals'
        if attr in self._enumVals:
            return self._enumVals[attr]
        else:
            return object.__getattribute__(self, attr)


BACKEND = ConfigEnum(
    'LSF',  # default
    LSF='lsf',
    SGE='sge',
    LOCAL='local',
)


class ConfigError(Exception):
    pass


@dataclass
class DispatchSettings:  # pylint: disable=too-many-instance-attributes
    """Tunables for one JobRunner. The defaults need no rc file."""

    attempts: int = 5
    delay: float = 10.0
    name_length: int = 1000
    script_dir: Optional[str] = None
    log_wait: float = 120.0
    tail_lines: int = 100
    poll_interval: float = 30.0


def _getConfig(cfgParser, section, option, defaultValue=None):
    if not cfgParser.has_section(section):
        return defaultValue
    if not cfgParser.has_option(section, option):
        return defaultValue
    return cfgParser.get(section, option)


def _getEnumConfig(cfgParser, section, option, enum):
    optionVal = _getConfig(
        cfgParser, section, option, enum.defaultVal)
    if optionVal not in list(enum.values()):
        raise ConfigError(
            "RC file has invalid \"{section}.{option}\" setting {optionVal}.  Valid "
            "options: {allowedVals}".format(
                section=section,
                option=option,
                optionVal=optionVal,
                allowedVals=", ".join(list(enum.values()))))

    return optionVal


def _getNumberConfig(cfgParser, section, option, default, convert=int, minimum=0):
    val = _getConfig(cfgParser, section, option, None)
    if val is None:
        return default
    try:
        number = convert(val)
    except ValueError:
        number = None
    if number is None or number < minimum:
        raise ConfigError(
            "RC file has invalid \"{section}.{option}\" setting {optionVal}.  "
            "Expected a number >= {minimum}".format(
                section=section,
                option=option,
                optionVal=val,
                minimum=minimum))
    return number


class Config(object):
    # pylint: disable=too-many-instance-attributes
    validConfig = {
        'submit': {'backend', 'attempts', 'delay', 'name length', 'script dir'},
        'status': {'log wait', 'tail lines', 'poll interval'},
        'scheduler': {'project', 'queue'},
    }

    def _validateConfigParser(self, cfgParser):
        cfgSections = set(cfgParser.sections())
        unknownSections = cfgSections - set(self.validConfig.keys())
        if unknownSections:
            raise ConfigError(
                "RC file has unknown configuration sections: {}".format(
                    ", ".join(sorted(unknownSections))))
        for section in cfgSections:
            cfgValues = set(cfgParser.options(section))
            unknownOptions = cfgValues - self.validConfig[section]
            if unknownOptions:
                raise ConfigError(
                    "RC file has unknown configuration options in "
                    "section \"{}\": {}".format(
                        section, ", ".join(sorted(unknownOptions))))

    def __init__(self, options):
        stateDir = options.stateDir
        self.options = options
        self._logDir = os.path.expanduser(stateDir) + "/log/"

        rcFile = os.path.expanduser(options.rcFile)
        cfgParser = six.moves.configparser.RawConfigParser()
        cfgParser.read(rcFile)
        self._validateConfigParser(cfgParser)

        self._backend = _getEnumConfig(cfgParser, 'submit', 'backend', BACKEND)
        defaults = DispatchSettings()
        scriptDir = _getConfig(cfgParser, 'submit', 'script dir', None)
        self._settings = DispatchSettings(
            attempts=_getNumberConfig(
                cfgParser, 'submit', 'attempts', defaults.attempts, minimum=1),
            delay=_getNumberConfig(
                cfgParser, 'submit', 'delay', defaults.delay, convert=float),
            name_length=_getNumberConfig(
                cfgParser, 'submit', 'name length', defaults.name_length,
                minimum=1),
            script_dir=os.path.expanduser(scriptDir) if scriptDir else None,
            log_wait=_getNumberConfig(
                cfgParser, 'status', 'log wait', defaults.log_wait, convert=float),
            tail_lines=_getNumberConfig(
                cfgParser, 'status', 'tail lines', defaults.tail_lines),
            poll_interval=_getNumberConfig(
                cfgParser, 'status', 'poll interval', defaults.poll_interval,
                convert=float),
        )
        self._project = _getConfig(cfgParser, 'scheduler', 'project', None)
        self._queue = _getConfig(cfgParser, 'scheduler', 'queue', None)

    @property
    def verbose(self):
        return self.options.verbose

    @staticmethod
    def checkDir(dirName):
        if not os.access(dirName, os.W_OK | os.X_OK | os.R_OK):
            os.makedirs(dirName)
        return dirName

    @property
    def logDir(self):
        return self.checkDir(self._logDir)

    @property
    def backend(self):
        return self._backend

    @property
    def project(self):
        return self._project

    @property
    def queue(self):
        return self._queue

    def dispatchSettings(self):
        return DispatchSettings(**vars(self._settings))
