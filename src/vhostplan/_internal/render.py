"""Rendering of configuration templates."""
import logging
from typing import Any
from typing import Iterable
from typing import Mapping
from typing import Optional

import jinja2

from vhostplan import errors
from vhostplan._internal.resources import TemplateRef

logger = logging.getLogger(__name__)

REWRITE_HTTPS_ARGS = "^ https://%{SERVER_NAME}%{REQUEST_URI} [END,NE,R=permanent]"
"""Rewrite rule arguments used for redirections to the https vhost"""


def bind_addresses(ports: Iterable[str], ip_address: str = "*") -> str:
    """Join port specs into a VirtualHost address list.

    The wildcard host of a port spec is replaced by ip_address, explicit
    hosts are kept.

    """
    addresses = []
    for port in ports:
        host, _, number = port.rpartition(":")
        addresses.append("{0}:{1}".format(ip_address if host == "*" else host, number))
    return " ".join(addresses)


class TemplateRenderer:
    """Renders templates shipped with vhostplan, or found in directory.

    :ivar str directory: directory searched before the bundled templates

    """

    def __init__(self, directory: Optional[str] = None) -> None:
        self.directory = directory
        loaders = [jinja2.PackageLoader("vhostplan._internal", "templates")]
        if directory is not None:
            loaders.insert(0, jinja2.FileSystemLoader(directory))
        self.env = jinja2.Environment(
            loader=jinja2.ChoiceLoader(loaders),
            undefined=jinja2.StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["bind"] = bind_addresses
        self.env.globals["redirect_rule"] = REWRITE_HTTPS_ARGS

    def render(self, template_id: str, bindings: Mapping[str, Any]) -> bytes:
        """Render one template.

        :raises .errors.ApplyError: if the template does not exist or
            uses a variable missing from bindings

        """
        try:
            template = self.env.get_template(template_id)
        except jinja2.TemplateNotFound:
            raise errors.ApplyError("Unknown template: {0}".format(template_id))
        except jinja2.TemplateSyntaxError as error:
            raise errors.ApplyError("Template {0} is invalid: {1}".format(template_id, error))
        logger.debug("Rendering %s from %s", template_id, template.filename)
        try:
            text = template.render(**bindings)
        except jinja2.UndefinedError as error:
            raise errors.ApplyError(
                "Template {0} uses unbound variable: {1}".format(template_id, error))
        return text.encode("utf-8")

    def render_ref(self, ref: TemplateRef) -> bytes:
        """Render and concatenate every template of ref."""
        bindings = ref.bindings_dict()
        return b"\n".join(self.render(name, bindings) for name in ref.names)
