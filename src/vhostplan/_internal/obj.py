"""Declared entities: virtual hosts and their SSL settings."""
import enum
from typing import NamedTuple
from typing import Optional
from typing import Tuple
from typing import Union

from vhostplan._internal import constants


class Ensure(enum.Enum):
    """Desired presence of a declared entity or a resource."""

    PRESENT = "present"
    ABSENT = "absent"


class ContentSource(NamedTuple):
    """Where the content of a file or directory comes from.

    At most one of ``content`` (inline) and ``source`` (external
    reference) is set; neither means the field was not declared.

    """
    content: Optional[str] = None
    source: Optional[str] = None

    @property
    def is_set(self) -> bool:
        """Whether inline content or an external source was declared."""
        return self.content is not None or self.source is not None


NO_CONTENT = ContentSource()


class SslSpec(NamedTuple):
    """SSL part of a virtual host declaration.

    Every ``*_source`` attribute is an external reference; when it is
    None the artifact is either generated locally (certificate, key) or
    left to platform defaults (CA certificate, CRL, chain).

    ``publish_csr`` is False (do not publish), True (publish in the
    document root) or an absolute path.

    """
    days: int = constants.DEFAULT_SSL_DAYS
    verify_client: Optional[str] = None
    ssl_only: bool = False
    ssl_ports: Tuple[str, ...] = tuple(constants.DEFAULT_SSL_PORTS)
    cert_source: Optional[str] = None
    key_source: Optional[str] = None
    cacert_source: Optional[str] = None
    cacrl_source: Optional[str] = None
    certchain_source: Optional[str] = None
    publish_csr: Union[bool, str] = False
    common_name: Optional[str] = None
    country: Optional[str] = None
    state: Optional[str] = None
    locality: Optional[str] = None
    organization: str = constants.DEFAULT_ORGANIZATION
    unit: Optional[str] = None
    email: Optional[str] = None


class VhostSpec(NamedTuple):
    """A declared Apache virtual host.

    Instances are produced by
    :class:`~vhostplan._internal.validation.ParameterValidator` and are
    never mutated; an ``ensure`` of :attr:`Ensure.ABSENT` requests removal.

    :ivar str name: ServerName, also used as path component
    :ivar str document_root: absolute DocumentRoot, None for the default
    :ivar cgi_bin: True for the default cgi-bin, False for none, or a path
    :ivar SslSpec ssl: SSL settings, None for a plain HTTP vhost

    """
    name: str
    ensure: Ensure = Ensure.PRESENT
    root: Optional[str] = None
    document_root: Optional[str] = None
    cgi_bin: Union[bool, str] = True
    aliases: Tuple[str, ...] = ()
    ip_address: str = "*"
    ports: Tuple[str, ...] = tuple(constants.DEFAULT_PORTS)
    options: Tuple[str, ...] = ()
    user: Optional[str] = None
    group: Optional[str] = None
    admin: Optional[str] = None
    mode: int = constants.DEFAULT_MODE
    config: ContentSource = NO_CONTENT
    htdocs: ContentSource = NO_CONTENT
    cgi: ContentSource = NO_CONTENT
    private: ContentSource = NO_CONTENT
    readme: ContentSource = NO_CONTENT
    userdir: bool = False
    ssl: Optional[SslSpec] = None

    @property
    def present(self) -> bool:
        """Whether the vhost should exist."""
        return self.ensure is Ensure.PRESENT
