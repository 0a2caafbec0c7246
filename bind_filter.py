#!/usr/bin/python3

# Copyright 2026 The bind-filter authors
#
# This file is part of bind-filter.
#
# bind-filter is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# bind-filter is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with bind-filter.  If not, see <https://www.gnu.org/licenses/>.

import fcntl
import functools
import logging
import logging.config
import os
import subprocess
import sys
from argparse import ArgumentParser
from collections import namedtuple
from configparser import ConfigParser, Error as ConfigError
from http.client import HTTPException
from pathlib import Path
from shutil import copyfileobj, which
from subprocess import PIPE, STDOUT
from tempfile import NamedTemporaryFile
from typing import Dict, Iterable, Set
from urllib.request import Request, urlopen

VERSION = "1.1"

logging.basicConfig(format="[%(asctime)s] %(levelname)s: %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S")
logger = logging.getLogger("bind-filter")
logger.setLevel(logging.INFO)

BLOCKED_ZONE_URL = ("https://raw.githubusercontent.com/percioandrade/"
                    "bindfilter/refs/heads/main/blockeddomains.db")
ACL_CONFIG_URL = ("https://raw.githubusercontent.com/percioandrade/"
                  "bindfilter/refs/heads/main/blocked_domain_acl.conf")

blurb = """
This program keeps an ISC bind name server in agreement with a published
domain block list. It downloads the blocked zone and its access control
file, includes the access control file from named.conf, and restarts the
name server.
"""

default_config_file = f"""
[main]
named_conf           = /etc/bind/named.conf
zone_file            = /etc/bind/zones/blockeddomains.db
acl_file             = /etc/bind/blocked_domain_acl.conf
daemon_name          = named
service_name         = named
file_mode            = 644
require_root         = on

#
# --update only downloads files. Turn this on to restart the name server
# after every update, or pass --restart.
#
restart_after_update = off

#
# The line added to named.conf. Settings in this section are available
# for interpolation.
#
#include_directive    = include "%(acl_file)s";

#
# You may provide your own log config to customize message formats,
# destinations, levels, etc.
#
# See: https://docs.python.org/3/library/logging.config.html
#
#log_config           = /etc/bind-filter-loggers.ini

#
# Sources are fetched with a plain GET. Missing files are fetched by --run,
# all files are refetched by --update.
#
[source]
zone_url             = {BLOCKED_ZONE_URL}
acl_url              = {ACL_CONFIG_URL}
"""


class CommandExitSuccess(Exception):
    """
    Raised to end execution early while indicating success.
    This is used to implement secondary workflows like --init.
    """
    pass


class CommandExitFailure(Exception):
    """
    Raised to end execution early while indicating failure.
    Any applicable error messages should be logged before raising this.
    """
    exit_code = os.EX_SOFTWARE


class PreconditionError(CommandExitFailure):
    """
    The host is not ready to be reconciled. Nothing has been changed.
    """
    exit_code = os.EX_CONFIG


class DownloadError(CommandExitFailure):
    exit_code = os.EX_UNAVAILABLE

    def __init__(self, artifact, cause):
        super().__init__(f"could not download {artifact.name}: {cause}")
        self.artifact = artifact
        self.cause = cause


class WriteError(CommandExitFailure):
    exit_code = os.EX_CANTCREAT

    def __init__(self, path, cause):
        super().__init__(f"could not write {path}: {cause}")
        self.path = path
        self.cause = cause


class RestartFailure(CommandExitFailure):
    """
    The service manager refused the restart. Files already written stay
    in place; the new configuration is picked up by the next restart.
    """
    exit_code = os.EX_SOFTWARE

    def __init__(self, service_name, cause):
        super().__init__(f"could not restart {service_name}: {cause}")
        self.service_name = service_name
        self.cause = cause


RUN, UPDATE, CHECK = "run", "update", "check"

ZONE, ACL = "zone", "acl"

RunContext = namedtuple("RunContext", [
    "named_conf", "zone_file", "zone_url", "acl_file", "acl_url",
    "include_directive", "daemon_name", "service_name", "file_mode",
    "require_root"
])

Artifact = namedtuple("Artifact", ["name", "url", "path"])


def artifacts(context) -> Dict[str, Artifact]:
    return {
        ZONE: Artifact(ZONE, context.zone_url, Path(context.zone_file)),
        ACL: Artifact(ACL, context.acl_url, Path(context.acl_file)),
    }


class Settings:
    """
    The Settings class overlays a traditional python ArgumentParser on
    top of a traditional ConfigParser. Sources are consulted in order
    of precedence: program arguments first, then a config file if that
    exists, and finally the defaults provided here.

    This class will look for the config file at /etc/bind-filter.ini by
    default. The user may specify an alternate config file with the
    --config flag. Paths and service names live in the main section,
    remote locations in the source section.
    """
    main_section = "main"  # local paths and service settings
    source_section = "source"  # where the block list files come from

    make_available_for_interpolation = ["acl_file"]

    octal = functools.partial(int, base=8)

    def __init__(self, argv=None):
        """
        Create the ArgumentParser, ConfigParser, and related metadata,
        then parse argv (sys.argv when None).

        Each setting in `make_available_for_interpolation` is retrieved
        then saved back to the cfg_parser, so an --acl-file given on the
        command line also lands in the include directive.
        """
        self.metadata = {}  # built up with each call to add_setting
        self.arg_parser = ArgumentParser(description=blurb)
        self.cfg_parser = ConfigParser(delimiters=("=",))
        self.cfg_parser.optionxform = str
        self.cfg_parser.add_section(self.main_section)
        self.cfg_parser.add_section(self.source_section)
        self.catalog()
        self.args = self.arg_parser.parse_args(argv)
        if self.args.config_path.is_file():
            try:
                self.cfg_parser.read(self.args.config_path)
            except ConfigError as ex:
                logger.error("could not read %s: %s", self.args.config_path,
                             ex)
                raise PreconditionError(self.args.config_path) from ex
        for dest in self.make_available_for_interpolation:
            meta = self.metadata[dest]
            value = self.get_setting(dest)
            self.cfg_parser.set(meta.section, dest,
                                None if value is None else str(value))

    def __getattr__(self, item):
        return self.get_setting(item)

    def catalog(self):
        self.arg_parser.add_argument("--version", action="version",
                                     version="%(prog)s " + VERSION)
        operations = self.arg_parser.add_mutually_exclusive_group()
        self.add_setting("-r", "--run", dest="operation", type=str,
                         default=None, action="store_const", const=RUN,
                         group=operations,
                         help="check, download missing files, include the "
                              "acl config and restart the name server")
        self.add_setting("-u", "--update", dest="operation", type=str,
                         default=None, action="store_const", const=UPDATE,
                         group=operations,
                         help="download the block list files again")
        self.add_setting("-c", "--check", dest="operation", type=str,
                         default=None, action="store_const", const=CHECK,
                         group=operations,
                         help="make sure named.conf includes the acl config")
        self.add_setting("--init", dest="init", type=bool, default=False,
                         action="store_true", group=operations,
                         help="write the default config file")
        self.add_setting("-a", "--all", dest="update_all", type=bool,
                         default=False, action="store_true",
                         help="update all files (used with --update)")
        self.add_setting("-z", "--zone", dest="update_zone", type=bool,
                         default=False, action="store_true",
                         help="update only the blocked zone file")
        self.add_setting("-l", "--acl", dest="update_acl", type=bool,
                         default=False, action="store_true",
                         help="update only the acl config file")
        self.add_setting("--restart", dest="restart_after_update", type=bool,
                         default=False, action="store_true",
                         help="restart the name server after --update",
                         section=self.main_section)
        self.add_setting("--config", dest="config_path", type=Path,
                         default="/etc/bind-filter.ini",
                         help="config file path")
        self.add_setting("--log-config", dest="log_config", type=Path,
                         default="/etc/bind-filter-loggers.ini",
                         section=self.main_section)
        self.add_setting("-v", "--verbose", dest="verbose", type=bool,
                         default=False, action="store_true",
                         help="log all messages")
        self.add_setting("-s", "--silent", dest="silent", type=bool,
                         default=False, action="store_true",
                         help="do not log any messages")
        self.add_setting("--named-conf", dest="named_conf", type=Path,
                         default="/etc/bind/named.conf",
                         help="main name server config file",
                         section=self.main_section)
        self.add_setting("--zone-file", dest="zone_file", type=Path,
                         default="/etc/bind/zones/blockeddomains.db",
                         help="where to keep the blocked zone",
                         section=self.main_section)
        self.add_setting("--acl-file", dest="acl_file", type=Path,
                         default="/etc/bind/blocked_domain_acl.conf",
                         help="where to keep the acl config",
                         section=self.main_section)
        self.add_setting("--zone-url", dest="zone_url", type=str,
                         default=BLOCKED_ZONE_URL,
                         help="blocked zone provider",
                         section=self.source_section)
        self.add_setting("--acl-url", dest="acl_url", type=str,
                         default=ACL_CONFIG_URL,
                         help="acl config provider",
                         section=self.source_section)
        self.add_setting("--daemon", dest="daemon_name", type=str,
                         default="named",
                         help="name server executable to look for",
                         section=self.main_section)
        self.add_setting("--service", dest="service_name", type=str,
                         default="named",
                         help="service to restart",
                         section=self.main_section)
        self.add_setting(dest="include_directive", type=str,
                         default='include "%(acl_file)s";',
                         section=self.main_section)
        self.add_setting(dest="file_mode", type=self.octal, default="644",
                         section=self.main_section)
        self.add_setting(dest="require_root", type=bool, default=True,
                         section=self.main_section)
        self.add_setting("--install-daemon", dest="install_daemon", type=bool,
                         default=False, action="store_true",
                         help="offer to install bind when it is missing")
        self.add_setting("-y", "--assume-yes", dest="assume_yes", type=bool,
                         default=False, action="store_true",
                         help="do not ask before installing bind")

    Metadata = namedtuple("metadata", ["type", "section"])

    def add_setting(self, *args, dest=None, section=None, group=None,
                    **kwargs):
        """
        Prepare arg_parser and cfg_parser to accommodate a new setting.

        If section= is provided, the config file will be consulted. The
        setting will be looked up under that section. If flag arguments
        are not provided, only the config file will be consulted.

        If both the program arguments and the config file should be
        consulted for this setting, we store the setting default in
        cfg_parser. Otherwise we store the default in arg_parser.

        action= and type= are incompatible. If both are present, omit
        type from the call to arg_parser.add_argument().

        group= places the flag in an argument group, such as the
        mutually exclusive group of operations.
        """
        type = kwargs["type"]
        self.metadata[dest] = self.Metadata(type, section)
        if "action" in kwargs:
            kwargs.pop("type")

        default = kwargs.pop("default")
        parser = group or self.arg_parser

        if args and section:
            parser.add_argument(*args, dest=dest, default=None, **kwargs)
        elif args:
            parser.add_argument(*args, dest=dest, default=default, **kwargs)

        if section and default is None:
            self.cfg_parser[section][dest] = None
        elif section:
            self.cfg_parser[section][dest] = str(default)

    def get_setting(self, item):
        """
        Get the setting value by consulting sources in order of
        precedence: program arguments, then config file, then program
        defaults.

        If there is a value in the program arguments, use that. Then
        retrieve a value from the config file and ensure that value is
        of the correct type.
        """
        if item not in self.metadata:
            raise AttributeError(item)

        type, section = self.metadata[item]

        if getattr(self.args, item, None) is not None:
            return getattr(self.args, item)
        elif section is None:
            return None

        try:
            value = self.cfg_parser[section].get(item)
        except (TypeError, ConfigError) as ex:
            logger.error("could not interpolate %s: %s", item, ex)
            raise PreconditionError(item) from ex

        if value is None:
            return value
        elif type == bool:
            try:
                return self.cfg_parser[section].getboolean(item)
            except ValueError as ex:
                logger.error("%s must be on or off", item)
                raise PreconditionError(item) from ex
        else:
            try:
                return type(value)
            except ValueError as ex:
                logger.error("invalid value for %s: %s", item, value)
                raise PreconditionError(item) from ex

    def update_targets(self) -> Set[str]:
        """
        Artifacts named by --all, --zone and --acl. Both when none given.
        """
        targets = set()
        if self.update_all or self.update_zone:
            targets.add(ZONE)
        if self.update_all or self.update_acl:
            targets.add(ACL)
        return targets or {ZONE, ACL}

    def run_context(self) -> RunContext:
        return RunContext(
            named_conf=self.named_conf,
            zone_file=self.zone_file,
            zone_url=self.zone_url,
            acl_file=self.acl_file,
            acl_url=self.acl_url,
            include_directive=self.include_directive,
            daemon_name=self.daemon_name,
            service_name=self.service_name,
            file_mode=self.file_mode,
            require_root=self.require_root)


#
# State Checks
#


def running_as_root() -> bool:
    return os.geteuid() == 0


def daemon_installed(context) -> bool:
    return which(context.daemon_name) is not None


def main_config_exists(context) -> bool:
    return Path(context.named_conf).is_file()


COMMENT_PREFIXES = ("//", "#", "/*", "*")


def _has_directive(text, directive) -> bool:
    """
    True if directive appears on a line that is not a comment. A trailing
    comment after the directive still counts.
    """
    directive = directive.strip()
    for line in text.splitlines():
        line = line.strip()
        if line.startswith(COMMENT_PREFIXES):
            continue
        if directive in line:
            return True
    return False


def include_directive_present(context) -> bool:
    path = Path(context.named_conf)
    if not path.is_file():
        return False
    with path.open("r", encoding="utf-8",
                   errors="surrogateescape") as config_file:
        return _has_directive(config_file.read(), context.include_directive)


def missing_artifacts(context) -> Set[str]:
    return {name for name, artifact in artifacts(context).items()
            if not artifact.path.is_file()}


#
# Fetching
#


def _create_request(url):
    logger.info("requesting %s", url)
    return Request(url, headers={"User-Agent": "bind-filter/" + VERSION})


def _stage(artifact, file_mode) -> Path:
    """
    Download an artifact to a temporary file beside its destination.
    The caller owns the returned path. Nothing is left behind on failure.
    """
    req = _create_request(artifact.url)
    temp_path = None
    try:
        with NamedTemporaryFile("wb", dir=artifact.path.parent,
                                prefix="." + artifact.path.name + ".",
                                delete=False) as temp_file:
            temp_path = Path(temp_file.name)
            with urlopen(req) as res:
                copyfileobj(res, temp_file)
        os.chmod(temp_path, file_mode)
    except (OSError, HTTPException, ValueError) as ex:
        if temp_path is not None:
            _discard(temp_path)
        logger.error("failed to download %s from %s: %s",
                     artifact.path, artifact.url, ex)
        raise DownloadError(artifact, ex) from ex
    return temp_path


def _discard(path):
    try:
        path.unlink()
    except FileNotFoundError:
        pass


def _commit(artifact, temp_path):
    try:
        os.replace(temp_path, artifact.path)
    except OSError as ex:
        _discard(temp_path)
        logger.error("could not replace %s: %s", artifact.path, ex)
        raise WriteError(artifact.path, ex) from ex
    logger.info("%s updated", artifact.path)


def fetch(artifact, file_mode=0o644):
    """
    Download one artifact, replacing whatever is at its path.
    """
    _ensure_directories([artifact.path])
    _commit(artifact, _stage(artifact, file_mode))


def _ensure_directories(paths: Iterable[Path]):
    for directory in sorted({path.parent for path in paths}):
        if directory.is_dir():
            continue
        logger.info("creating directory %s", directory)
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as ex:
            logger.error("failed to create directory %s", directory)
            raise WriteError(directory, ex) from ex


def fetch_artifacts(context, names: Iterable[str]):
    """
    Download the named artifacts, always overwriting existing files.

    Every download is staged before any destination is replaced, so a
    failed download leaves all destinations as they were. Replacing is
    one os.replace per file: if replacing a later file fails, the files
    before it stay replaced and WriteError is raised. There are no
    retries; scheduling another attempt is up to the caller.
    """
    available = artifacts(context)
    selected = [available[name] for name in sorted(set(names))]
    _ensure_directories(artifact.path for artifact in selected)

    logger.info("downloading %s",
                ", ".join(str(artifact.path) for artifact in selected))
    staged = []
    try:
        for artifact in selected:
            staged.append((artifact, _stage(artifact, context.file_mode)))
        while staged:
            artifact, temp_path = staged.pop(0)
            _commit(artifact, temp_path)
    finally:
        for _, temp_path in staged:
            _discard(temp_path)
    logger.info("download complete")


#
# Config Patching
#


def ensure_include_directive(path, directive) -> bool:
    """
    Append directive to the file at path unless a line already matches.

    Membership test and append happen under one exclusive lock on the
    file, so concurrent runs cannot both append. Returns True when the
    file was changed.
    """
    path = Path(path)
    try:
        with path.open("r+", encoding="utf-8",
                       errors="surrogateescape") as config_file:
            fcntl.flock(config_file.fileno(), fcntl.LOCK_EX)
            text = config_file.read()
            if _has_directive(text, directive):
                logger.info("include line already exists in %s", path)
                return False
            logger.info("adding include line to %s", path)
            config_file.seek(0, os.SEEK_END)
            if text and not text.endswith("\n"):
                config_file.write("\n")
            config_file.write(directive + "\n")
    except OSError as ex:
        logger.error("failed to add include line to %s: %s", path, ex)
        raise WriteError(path, ex) from ex
    return True


#
# Service Control and Installation
#


def get_lines(text):
    """
    Yield non-empty lines from a blob of text.
    """
    for line in text.splitlines():
        if line:
            yield line


def _get_command(command_name, error):
    command = which(command_name)
    if command is None:
        logger.error("could not find %s", command_name)
        raise error
    return command


def _run_command(command_list):
    """
    Run a command to completion, logging its output. Returns the exit
    status; raises OSError when the command cannot be started.
    """
    logger.debug("running %s", " ".join(str(it) for it in command_list))
    proc = subprocess.run(command_list, stdout=PIPE, stderr=STDOUT,
                          universal_newlines=True)
    for line in get_lines(proc.stdout or ""):
        logger.debug(line.rstrip())
    return proc.returncode


def restart_service(service_name):
    logger.info("restarting %s service", service_name)
    systemctl = _get_command(
        "systemctl", RestartFailure(service_name, "systemctl not found"))
    try:
        returncode = _run_command([systemctl, "restart", service_name])
    except OSError as ex:
        logger.error("failed to restart %s service: %s", service_name, ex)
        raise RestartFailure(service_name, ex) from ex
    if returncode != 0:
        logger.error("failed to restart %s service", service_name)
        raise RestartFailure(service_name, f"exit status {returncode}")
    logger.info("%s service restarted successfully", service_name)


def read_os_release(path=Path("/etc/os-release")) -> Dict[str, str]:
    result = {}
    if not path.is_file():
        return result
    with path.open("r") as release_file:
        for line in get_lines(release_file.read()):
            key, sep, value = line.partition("=")
            if sep and not key.startswith("#"):
                result[key.strip()] = value.strip().strip("\"'")
    return result


def package_install_command(os_release) -> list:
    families = (os_release.get("ID", "") + " " +
                os_release.get("ID_LIKE", "")).split()
    if "debian" in families or "ubuntu" in families:
        return ["apt-get", "install", "-y", "bind9"]
    elif which("dnf"):
        return ["dnf", "install", "-y", "bind"]
    else:
        return ["yum", "install", "-y", "bind"]


def _confirm(question) -> bool:
    try:
        answer = input(question + " (y/N) ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


def install_daemon(context, assume_yes=False):
    """
    Install bind with the distribution's package manager. This is never
    part of a reconciliation pass on its own; the Reconciler only calls
    it when the operator opted in and the daemon is missing.
    """
    if not assume_yes and not _confirm(
            f"{context.daemon_name} is not installed. Install bind?"):
        logger.error("installation skipped")
        raise PreconditionError("installation skipped")
    os_release = read_os_release()
    if not os_release:
        logger.warning("cannot determine OS version")
    command_list = package_install_command(os_release)
    logger.info("installing bind with %s", command_list[0])
    try:
        returncode = _run_command(command_list)
    except OSError as ex:
        logger.error("could not run %s: %s", command_list[0], ex)
        raise PreconditionError("installation failed") from ex
    if returncode != 0:
        logger.error("%s failed", command_list[0])
        raise PreconditionError("installation failed")


#
# Reconciliation
#


START = "start"
PRECONDITIONS_CHECKED = "preconditions-checked"
ARTIFACTS_READY = "artifacts-ready"
CONFIG_PATCHED = "config-patched"
SERVICE_RESTARTED = "service-restarted"
FAILED = "failed"


class Reconciler:
    """
    Walk one operation through the reconciliation states:

        start -> preconditions-checked -> artifacts-ready
              -> config-patched -> service-restarted

    Any failure moves to the failed state and propagates. Changes made
    before the failure are kept; in particular a failed restart leaves
    the downloaded files and patched named.conf in place.

    installer, when given, is called with the run context if the daemon
    is missing. It is expected to raise PreconditionError on refusal.
    """

    def __init__(self, context, installer=None):
        self.context = context
        self.installer = installer
        self.state = START

    def _advance(self, state):
        logger.debug("%s -> %s", self.state, state)
        self.state = state

    def run(self, operation, targets=None, restart=None):
        """
        Perform one pass of `operation` (run, update or check).

        targets selects the artifacts for update and defaults to both.
        restart only matters for update; run always restarts and check
        never does.
        """
        if operation not in (RUN, UPDATE, CHECK):
            raise ValueError(f"unknown operation {operation!r}")
        logger.info("starting %s", operation)
        try:
            self._check_preconditions()
            self._ready_artifacts(operation, targets)
            self._patch_config()
            if operation == RUN or (operation == UPDATE and restart):
                self._restart()
        except CommandExitFailure:
            self._advance(FAILED)
            logger.error("%s failed", operation)
            raise
        logger.info("%s complete", operation)
        return self.state

    def _check_preconditions(self):
        context = self.context
        if context.require_root and not running_as_root():
            logger.error("this program must be run as root")
            raise PreconditionError("not running as root")
        if not daemon_installed(context) and self.installer is not None:
            logger.warning("%s is not installed", context.daemon_name)
            self.installer(context)
        if not daemon_installed(context):
            logger.error("%s is not installed, bind is required",
                         context.daemon_name)
            raise PreconditionError(f"{context.daemon_name} not installed")
        logger.info("%s found", context.daemon_name)
        if not main_config_exists(context):
            logger.error("configuration file %s not found", context.named_conf)
            raise PreconditionError(f"{context.named_conf} not found")
        self._advance(PRECONDITIONS_CHECKED)

    def _ready_artifacts(self, operation, targets):
        if operation == UPDATE:
            wanted = set(targets or (ZONE, ACL))
        elif operation == RUN:
            wanted = missing_artifacts(self.context)
            for name in sorted(wanted):
                logger.info("file not found: %s",
                            artifacts(self.context)[name].path)
        else:
            wanted = set()
            if ACL in missing_artifacts(self.context):
                logger.warning("%s is missing, run --update --acl",
                               self.context.acl_file)

        if wanted:
            fetch_artifacts(self.context, wanted)
        elif operation == RUN:
            logger.info("block list files present, nothing to download")
        self._advance(ARTIFACTS_READY)

    def _patch_config(self):
        ensure_include_directive(self.context.named_conf,
                                 self.context.include_directive)
        self._advance(CONFIG_PATCHED)

    def _restart(self):
        try:
            restart_service(self.context.service_name)
        except RestartFailure:
            logger.warning("configuration is updated, restart %s manually",
                           self.context.service_name)
            raise
        self._advance(SERVICE_RESTARTED)


#
# Main Procedure and Helpers
#


def _setup_config_file(settings):
    if settings.init and settings.config_path.is_file():
        logger.error("%s already exists", settings.config_path)
        raise CommandExitFailure
    elif settings.init:
        logger.info("writing %s", settings.config_path)
        try:
            with settings.config_path.open("w") as config_file:
                config_file.write(default_config_file.lstrip())
        except OSError as ex:
            logger.error("could not write %s: %s", settings.config_path, ex)
            raise WriteError(settings.config_path, ex) from ex
        raise CommandExitSuccess


def _setup_logging(settings):
    if settings.log_config.is_file():
        logging.config.fileConfig(settings.log_config,
                                  disable_existing_loggers=False)
    elif settings.verbose:
        logger.setLevel(logging.DEBUG)
    elif settings.silent:
        logger.setLevel(logging.ERROR)


def exit_code_wrapper(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            func(*args, **kwargs)
            return os.EX_OK
        except CommandExitSuccess:
            return os.EX_OK
        except CommandExitFailure as ex:
            return ex.exit_code
    return wrapper


@exit_code_wrapper
def main(argv=None):
    """
    Bring the name server in line with the block list.

    Each step checks its own result and raises on failure; no later
    step runs after an error.
    """
    settings = Settings(argv)

    _setup_logging(settings)
    _setup_config_file(settings)

    if settings.operation is None:
        settings.arg_parser.print_help()
        raise CommandExitSuccess

    installer = None
    if settings.install_daemon:
        installer = functools.partial(install_daemon,
                                      assume_yes=settings.assume_yes)

    reconciler = Reconciler(settings.run_context(), installer=installer)
    reconciler.run(settings.operation,
                   targets=settings.update_targets(),
                   restart=settings.restart_after_update)


if __name__ == "__main__":
    sys.exit(main())
