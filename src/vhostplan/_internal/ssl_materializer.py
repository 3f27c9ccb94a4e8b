"""SSL specific resources of a virtual host."""
import logging
import posixpath
from typing import Any
from typing import Dict
from typing import Iterable
from typing import List
from typing import Optional

from vhostplan._internal import constants
from vhostplan._internal.obj import SslSpec
from vhostplan._internal.obj import VhostSpec
from vhostplan._internal.paths import PathSet
from vhostplan._internal.platform import Platform
from vhostplan._internal.reload import ReloadCoordinator
from vhostplan._internal.resources import absent
from vhostplan._internal.resources import directory
from vhostplan._internal.resources import directory_key
from vhostplan._internal.resources import file
from vhostplan._internal.resources import NodeKind
from vhostplan._internal.resources import ResourceNode
from vhostplan._internal.resources import run_if_missing
from vhostplan._internal.resources import TemplateRef

logger = logging.getLogger(__name__)


def csr_publication_target(ssl: SslSpec, name: str, paths: PathSet) -> str:
    """Where the CSR is published, or would be when publication is off."""
    if isinstance(ssl.publish_csr, str):
        return ssl.publish_csr
    return posixpath.join(paths.document_root, name + ".csr")


class SSLMaterializer:
    """Decides, per certificate artifact, whether to source or generate it.

    The key pair is produced by the external generator, which only runs
    while the CSR does not exist: a convergence pass never rotates an
    existing key and certificate.

    """

    def __init__(self, platform: Platform, coordinator: ReloadCoordinator) -> None:
        self.platform = platform
        self.coordinator = coordinator

    def generator_command(self, spec: VhostSpec, paths: PathSet) -> List[str]:
        """Invocation of the certificate generation script."""
        assert spec.ssl is not None
        script = self.platform.options.generator or constants.GENERATOR_SCRIPT
        return [script, spec.name, paths.ssl_config, paths.ssl_dir, str(spec.ssl.days)]

    def materialize_ssl(self, spec: VhostSpec, paths: PathSet) -> List[ResourceNode]:
        """Plan the SSL resources of spec.

        :returns: nodes, in dependency order
        :rtype: list

        """
        ssl = spec.ssl
        assert ssl is not None, "materialize_ssl needs an SSL vhost"

        if not spec.present:
            # Individual certificate files are not enumerated, removing
            # the directory tree is enough.
            return [absent(NodeKind.DIRECTORY, paths.ssl_dir, force=True)]

        cert_t = self.platform.seltype(constants.SELTYPE_CERT)
        ssl_dir = directory(paths.ssl_dir, owner=spec.admin, group=spec.admin, mode=0o700,
                            seltype=cert_t).needing(directory_key(paths.instance_dir))
        descriptor = file(paths.ssl_config, owner=spec.admin, mode=0o640,
                          template=TemplateRef.build([constants.TEMPLATE_SSLEAY],
                                                     self.subject_bindings(spec)),
                          ).needing(ssl_dir.key)
        generator = run_if_missing(paths.csr, self.generator_command(spec, paths)
                                   ).needing(ssl_dir.key, descriptor.key)
        self.coordinator.register(generator.key)
        nodes = [ssl_dir, descriptor, generator]

        # The generator writes the certificate and the key as well, an
        # explicit source is applied after it so that the source wins.
        for path, source, mode in ((paths.cert, ssl.cert_source, 0o644),
                                   (paths.key, ssl.key_source, 0o600)):
            if source is not None:
                nodes.append(self._sourced(spec, path, source, mode, cert_t,
                                           generator.key))

        for path, source in ((paths.cacert, ssl.cacert_source),
                             (paths.cacrl, ssl.cacrl_source),
                             (paths.certchain, ssl.certchain_source)):
            if source is not None:
                nodes.append(self._sourced(spec, path, source, 0o644, cert_t,
                                           ssl_dir.key))

        nodes.append(self._csr_publication(spec, paths, generator.key))
        logger.debug("Planned %d SSL resources for %s", len(nodes), spec.name)
        return nodes

    def _sourced(self, spec: VhostSpec, path: str, source: str, mode: int,
                 seltype: Optional[str], after: str) -> ResourceNode:
        node = file(path, source=source, owner=spec.admin, group=spec.admin,
                    mode=mode, seltype=seltype).needing(after)
        self.coordinator.register(node.key)
        return node

    def _csr_publication(self, spec: VhostSpec, paths: PathSet,
                         generator: str) -> ResourceNode:
        assert spec.ssl is not None
        target = csr_publication_target(spec.ssl, spec.name, paths)
        if spec.ssl.publish_csr is False:
            return absent(NodeKind.FILE, target)
        needs = [generator]
        if spec.ssl.publish_csr is True:
            needs.append(directory_key(paths.document_root))
        return file(target, copy_of=paths.csr, mode=0o644,
                    always_apply=True).needing(*needs)

    @staticmethod
    def config_dependencies(nodes: Iterable[ResourceNode]) -> List[str]:
        """Keys the Apache configuration must wait for.

        Apache refuses to start with a missing certificate file, so the
        configuration follows the generator and every sourced file.

        """
        return [node.key for node in nodes
                if node.present and node.kind is not NodeKind.DIRECTORY
                and node.copy_of is None and node.template is None]

    @staticmethod
    def subject_bindings(spec: VhostSpec) -> Dict[str, Any]:
        """Bindings of the generation descriptor."""
        ssl = spec.ssl
        assert ssl is not None
        return {
            "name": spec.name,
            "days": ssl.days,
            "common_name": ssl.common_name or spec.name,
            "country": ssl.country,
            "state": ssl.state,
            "locality": ssl.locality,
            "organization": ssl.organization,
            "unit": ssl.unit,
            "email": ssl.email,
        }

    @staticmethod
    def bindings(spec: VhostSpec, paths: PathSet) -> Dict[str, Any]:
        """Bindings added to the configuration templates of an SSL vhost.

        Without an explicit CA certificate, the platform bundle is used.

        """
        ssl = spec.ssl
        assert ssl is not None
        return {
            "ssl_ports": list(ssl.ssl_ports),
            "cert": paths.cert,
            "key": paths.key,
            "certchain": paths.certchain if ssl.certchain_source else None,
            "cacert": paths.cacert if ssl.cacert_source else paths.default_ca_bundle,
            "cacrl": paths.cacrl if ssl.cacrl_source else None,
            "verify_client": ssl.verify_client,
        }
