import json
import os
from fnmatch import fnmatch

from icsparser.lib.error import log

"""
Configuration files for calendar feeds.  A config file is json (or
yaml, if pyyaml is installed) with named sections:

  {
    "default": {"ics_url": "https://example.com/team.ics", "ics_timeout": 10},
    "holidays": {"inherits": "default", "ics_url": "https://example.com/holidays.ics"}
  }

Keys with the ``ics_`` prefix are passed on to ICSClient, see
``icsparser.client.get_client``.  Sections marked ``"disable": true``
are treated as empty.
"""

CONFIG_LOCATIONS = (
    "{cfgdir}/icsparser/calendar.conf",
    "{cfgdir}/icsparser/calendar.yaml",
    "{cfgdir}/icsparser/calendar.json",
    "{cfgdir}/calendar.conf",
    "/etc/icsparser/calendar.conf",
)


def expand_config_section(config, section="default", blacklist=None):
    """
    The names of the feed sections a section name refers to.  Usually
    that is just ``[section]``, but we also allow:

    * ``*`` for every enabled section in the file
    * glob patterns, ``work_*`` gives every section starting with ``work_``
    * meta sections listing other sections (or patterns) under ``contains``
    """
    if section == "*":
        return [x for x in config if not config[x].get("disable", False)]

    if set(section).isdisjoint(set("[*?")):
        if "contains" not in config.get(section, {}):
            if config.get(section, {}).get("disable", False):
                return []
            return [section]
        results = []
        blacklist = blacklist or set()
        blacklist.add(section)
        for subsection in config[section]["contains"]:
            if subsection in results or subsection in blacklist:
                continue
            for found in expand_config_section(config, subsection, blacklist):
                if found not in results:
                    results.append(found)
        return results

    results = []
    for name in config:
        if not fnmatch(name, section) or not set(name).isdisjoint(set("[*?")):
            continue
        for found in expand_config_section(config, name, blacklist):
            if found not in results:
                results.append(found)
    return results


def config_section(config, section="default"):
    """
    The settings of a section, including those of the sections it
    inherits from.  Later sections in the chain win.
    """
    if config.get(section, {}).get("disable", False):
        return {}
    if section in config and "inherits" in config[section]:
        ret = config_section(config, config[section]["inherits"])
    else:
        ret = {}
    if section in config:
        ret.update(config[section])
    ret.pop("inherits", None)
    return ret


def read_config(fn):
    """
    Reads the config file fn, or the first config file found in the
    usual locations if fn is not given.  Returns {} for broken files
    and None if nothing was found at all.
    """
    if not fn:
        cfgdir = f"{os.environ.get('HOME', '/')}/.config"
        for config_file in CONFIG_LOCATIONS:
            cfg = read_config(config_file.format(cfgdir=cfgdir))
            if cfg:
                return cfg
        return None

    try:
        try:
            with open(fn, "rb") as config_file:
                return json.load(config_file)
        except json.decoder.JSONDecodeError:
            ## Late import, yaml is an optional dependency
            try:
                import yaml
            except ImportError:
                log.error(
                    f"config file {fn} exists but is not valid json, and pyyaml is not installed."
                )
                return {}
            try:
                with open(fn, "rb") as config_file:
                    return yaml.safe_load(config_file) or {}
            except yaml.YAMLError:
                log.error(
                    f"config file {fn} exists but is neither valid json nor yaml.  Check the syntax."
                )
    except FileNotFoundError:
        log.info(f"no config file {fn} found")
    except (OSError, ValueError):
        log.error(f"error in config file {fn}.  It will be ignored", exc_info=True)
    return {}
