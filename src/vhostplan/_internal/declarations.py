"""Declaration files, one section per virtual host.

Example::

    # defaults shared by every virtual host of this file
    root = /srv/www

    [www.example.com]
    aliases = example.com, www.example.org
    ssl = yes
    publish_csr = yes

    [intranet.example.com]
    ensure = absent

"""
import logging
from typing import Any
from typing import Dict
from typing import Iterable
from typing import List

import configobj

from vhostplan import errors
from vhostplan._internal.validation import LIST_PARAMS

logger = logging.getLogger(__name__)


def load_declarations(filename: str) -> List[Dict[str, Any]]:
    """Read the virtual host declarations of filename.

    Top level options are defaults for every section. The ``name`` of a
    virtual host defaults to the title of its section.

    :param str filename: path to the declaration file

    :returns: raw parameters of every declaration, in file order
    :rtype: list

    :raises .errors.ValidationError: if the file cannot be parsed

    """
    try:
        config = configobj.ConfigObj(filename, encoding='utf-8', default_encoding='utf-8',
                                     file_error=True, raise_errors=True)
    except (configobj.ConfigObjError, IOError) as error:
        raise errors.ValidationError(
            "Unable to read declarations from {0}: {1}".format(filename, error))

    defaults = {key: config[key] for key in config.scalars}
    declarations = []
    for section_name in config.sections:
        section = config[section_name]
        if section.sections:
            raise errors.ValidationError(
                "Nested sections are not supported, found {0} in [{1}]".format(
                    ", ".join(section.sections), section_name))
        params: Dict[str, Any] = dict(defaults)
        params.update((key, section[key]) for key in section.scalars)
        params.setdefault("name", section_name)
        declarations.append(_listify(section_name, params))
    logger.debug("Loaded %d declaration(s) from %s", len(declarations), filename)
    return declarations


def load_all(filenames: Iterable[str]) -> List[Dict[str, Any]]:
    """Declarations of every file of filenames, in order."""
    declarations: List[Dict[str, Any]] = []
    for filename in filenames:
        declarations.extend(load_declarations(filename))
    return declarations


def _listify(section_name: str, params: Dict[str, Any]) -> Dict[str, Any]:
    # configobj only returns a list for values with a comma
    for param, value in sorted(params.items()):
        if param in LIST_PARAMS:
            if isinstance(value, str):
                params[param] = [value] if value else []
        elif isinstance(value, list):
            raise errors.ValidationError(
                "{0} in [{1}] must be a single value, got {2!r}; quote values "
                "containing commas".format(param, section_name, value))
    return params
