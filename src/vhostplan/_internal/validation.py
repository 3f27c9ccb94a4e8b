"""Validation and normalization of declared virtual host parameters."""
import logging
import posixpath
import re
from typing import Any
from typing import Dict
from typing import Mapping
from typing import Optional
from typing import Tuple
from typing import Union

from cryptography import x509
from cryptography.x509.oid import NameOID

from vhostplan import errors
from vhostplan import util
from vhostplan._internal import constants
from vhostplan._internal.obj import ContentSource
from vhostplan._internal.obj import Ensure
from vhostplan._internal.obj import NO_CONTENT
from vhostplan._internal.obj import SslSpec
from vhostplan._internal.obj import VhostSpec
from vhostplan._internal.platform import Platform

logger = logging.getLogger(__name__)

# Host-like names, also used as a path component: no slash, no leading dot.
NAME_REGEX = re.compile(r"^[A-Za-z0-9_*][A-Za-z0-9_.*-]*$")
PORT_REGEX = re.compile(r"^(\*|_default_|\[[0-9A-Fa-f:.]+\]|[A-Za-z0-9_.-]+):(\*|\d{1,5})$")

VHOST_PARAMS = (
    "name", "ensure", "root", "docroot", "cgibin", "aliases", "ip_address",
    "ports", "options", "user", "group", "admin", "mode",
    "config_content", "config_source", "readme_content", "readme_source",
    "htdocs_source", "cgi_source", "private_source", "userdir", "ssl",
)

SSL_PARAMS = (
    "days", "verify_client", "ssl_only", "ssl_ports", "cert_source",
    "key_source", "cacert_source", "cacrl_source", "certchain_source",
    "publish_csr", "common_name", "country", "state", "locality",
    "organization", "unit", "email",
)

LIST_PARAMS = ("aliases", "ports", "options", "ssl_ports")

STRING_PARAMS = (
    "ensure", "root", "docroot", "ip_address", "user", "group", "admin",
    "config_content", "config_source", "readme_content", "readme_source",
    "htdocs_source", "cgi_source", "private_source", "verify_client",
    "cert_source", "key_source", "cacert_source", "cacrl_source",
    "certchain_source", "common_name", "country", "state", "locality",
    "organization", "unit", "email",
)

HOST_REGEX = re.compile(r"^(\*|_default_|\[[0-9A-Fa-f:.]+\]|[A-Za-z0-9_.-]+)$")

SUBJECT_OIDS = (
    ("common_name", NameOID.COMMON_NAME),
    ("country", NameOID.COUNTRY_NAME),
    ("state", NameOID.STATE_OR_PROVINCE_NAME),
    ("locality", NameOID.LOCALITY_NAME),
    ("organization", NameOID.ORGANIZATION_NAME),
    ("unit", NameOID.ORGANIZATIONAL_UNIT_NAME),
    ("email", NameOID.EMAIL_ADDRESS),
)


def require_absolute(param: str, path: str) -> str:
    """Check that path is an absolute POSIX path and normalize it.

    A trailing slash is kept, cgi-bin paths rely on it.

    :raises .errors.ValidationError: if path is relative or empty

    """
    if not isinstance(path, str) or not posixpath.isabs(path):
        raise errors.ValidationError(
            "{0} must be an absolute path, got {1!r}".format(param, path))
    normalized = posixpath.normpath(path)
    if path.endswith("/") and normalized != "/":
        normalized += "/"
    return normalized


def content_source(field: str, content: Optional[str],
                   source: Optional[str]) -> ContentSource:
    """Build the content source of a field, refusing two set values.

    :raises .errors.ConfigurationConflictError: if both are set

    """
    if content is not None and source is not None:
        raise errors.ConfigurationConflictError(
            field, (field + "_content", field + "_source"))
    if content is None and source is None:
        return NO_CONTENT
    return ContentSource(content=content, source=source)


def build_subject(fields: Mapping[str, Optional[str]]) -> x509.Name:
    """Build the certificate subject declared by fields.

    :raises .errors.ValidationError: if an attribute is rejected, eg. a
        country which is not a two letter code

    """
    attributes = []
    for param, oid in SUBJECT_OIDS:
        value = fields.get(param)
        if value is None:
            continue
        try:
            attributes.append(x509.NameAttribute(oid, value))
        except (TypeError, ValueError) as error:
            raise errors.ValidationError(
                "Invalid certificate {0} {1!r}: {2}".format(param, value, error))
    return x509.Name(attributes)


class ParameterValidator:
    """Turns raw declaration parameters into a `.VhostSpec`.

    :ivar platform: Platform providing default identities and paths
    :type platform: :class:`~vhostplan._internal.platform.Platform`

    """

    def __init__(self, platform: Platform) -> None:
        self.platform = platform

    def validate(self, params: Mapping[str, Any]) -> VhostSpec:
        """Validate params and apply defaults.

        :param dict params: raw parameters, eg. one declaration section

        :returns: normalized, read-only declaration
        :rtype: `.VhostSpec`

        :raises .errors.ValidationError: if a parameter is malformed
        :raises .errors.ConfigurationConflictError: if inline content and
            an external source are both set for one field

        """
        unknown = sorted(set(params) - set(VHOST_PARAMS) - set(SSL_PARAMS))
        if unknown:
            raise errors.ValidationError(
                "Unknown parameter(s): {0}".format(", ".join(unknown)))
        for param in LIST_PARAMS:
            if param in params:
                self._list(param, params[param])
        for param in STRING_PARAMS:
            self._string(param, params.get(param))

        name = self._name(params.get("name"))
        ensure = self._ensure(params.get("ensure", "present"))

        ssl_enabled = self._bool("ssl", params.get("ssl", False))
        ssl_given = sorted(param for param in SSL_PARAMS if param in params)
        if ssl_given and not ssl_enabled:
            raise errors.ValidationError(
                "SSL parameter(s) {0} require ssl to be enabled for {1}".format(
                    ", ".join(ssl_given), name))

        root = params.get("root")
        cgibin = util.parse_bool_or_path(params.get("cgibin", True))
        if isinstance(cgibin, str):
            cgibin = require_absolute("cgibin", cgibin)

        spec = VhostSpec(
            name=name,
            ensure=ensure,
            root=require_absolute("root", root) if root is not None else None,
            document_root=(require_absolute("docroot", params["docroot"])
                           if params.get("docroot") is not None else None),
            cgi_bin=cgibin,
            aliases=self._list("aliases", params.get("aliases", ())),
            ip_address=self._ip_address(params.get("ip_address", "*")),
            ports=self._ports("ports", params.get("ports", constants.DEFAULT_PORTS)),
            options=self._list("options", params.get("options", ())),
            user=params.get("user") or self.platform.options.user,
            group=params.get("group") or self.platform.options.group,
            admin=params.get("admin") or self.platform.options.admin,
            mode=util.parse_mode(params.get("mode", constants.DEFAULT_MODE)),
            config=content_source(
                "config", params.get("config_content"), params.get("config_source")),
            readme=content_source(
                "readme", params.get("readme_content"), params.get("readme_source")),
            htdocs=content_source("htdocs", None, params.get("htdocs_source")),
            cgi=content_source("cgi", None, params.get("cgi_source")),
            private=content_source("private", None, params.get("private_source")),
            userdir=self._bool("userdir", params.get("userdir", False)),
            ssl=self._ssl(name, params) if ssl_enabled else None,
        )
        logger.debug("Validated declaration of %s (ensure=%s)", name, ensure.value)
        return spec

    def _ssl(self, name: str, params: Mapping[str, Any]) -> SslSpec:
        verify_client = params.get("verify_client")
        if verify_client is not None and verify_client not in constants.VERIFY_CLIENT_VALUES:
            raise errors.ValidationError(
                "verify_client must be one of {0}, got {1!r}".format(
                    ", ".join(constants.VERIFY_CLIENT_VALUES), verify_client))

        publish_csr = util.parse_bool_or_path(params.get("publish_csr", False))
        if isinstance(publish_csr, str):
            publish_csr = require_absolute("publish_csr", publish_csr)

        subject: Dict[str, Optional[str]] = {
            param: params.get(param) for param, _ in SUBJECT_OIDS}
        if subject["common_name"] is None:
            subject["common_name"] = name
        if subject["organization"] is None:
            subject["organization"] = constants.DEFAULT_ORGANIZATION
        build_subject(subject)

        return SslSpec(
            days=self._days(params.get("days", constants.DEFAULT_SSL_DAYS)),
            verify_client=verify_client,
            ssl_only=self._bool("ssl_only", params.get("ssl_only", False)),
            ssl_ports=self._ports(
                "ssl_ports", params.get("ssl_ports", constants.DEFAULT_SSL_PORTS)),
            cert_source=params.get("cert_source"),
            key_source=params.get("key_source"),
            cacert_source=params.get("cacert_source"),
            cacrl_source=params.get("cacrl_source"),
            certchain_source=params.get("certchain_source"),
            publish_csr=publish_csr,
            **subject
        )

    @staticmethod
    def _name(name: Any) -> str:
        if not isinstance(name, str) or not NAME_REGEX.match(name):
            raise errors.ValidationError("Invalid virtual host name: {0!r}".format(name))
        return name

    @staticmethod
    def _ensure(value: Any) -> Ensure:
        try:
            return Ensure(value)
        except ValueError:
            raise errors.ValidationError(
                "ensure must be one of {0}, got {1!r}".format(
                    ", ".join(constants.ENSURE_VALUES), value))

    @staticmethod
    def _bool(param: str, value: Any) -> bool:
        parsed = util.parse_bool_or_path(value)
        if not isinstance(parsed, bool):
            raise errors.ValidationError(
                "{0} must be a boolean, got {1!r}".format(param, value))
        return parsed

    @staticmethod
    def _string(param: str, value: Any) -> None:
        # configobj splits unquoted values on commas
        if value is not None and not isinstance(value, str):
            raise errors.ValidationError(
                "{0} must be a string, got {1!r}".format(param, value))

    @staticmethod
    def _ip_address(value: str) -> str:
        if not HOST_REGEX.match(value):
            raise errors.ValidationError(
                "ip_address must be an address or *, got {0!r}".format(value))
        return value

    @staticmethod
    def _list(param: str, value: Any) -> Tuple[str, ...]:
        if not isinstance(value, (list, tuple)):
            raise errors.ValidationError(
                "{0} must be a list, got {1!r}".format(param, value))
        return tuple(str(item) for item in value)

    def _ports(self, param: str, value: Any) -> Tuple[str, ...]:
        ports = self._list(param, value)
        for port in ports:
            if not PORT_REGEX.match(port):
                raise errors.ValidationError(
                    "Invalid bind specification in {0}: {1!r}, "
                    "expected address:port".format(param, port))
        return ports

    @staticmethod
    def _days(value: Union[int, str]) -> int:
        try:
            days = int(value)
        except (TypeError, ValueError):
            raise errors.ValidationError("days must be an integer, got {0!r}".format(value))
        if isinstance(value, bool) or days <= 0:
            raise errors.ValidationError("days must be positive, got {0!r}".format(value))
        return days
