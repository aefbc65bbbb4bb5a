"""
ACME Client
~~~~~~~~~~~

certbot adapter: obtain a certificate for one domain using the
standalone HTTP-01 authenticator.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from doh_edge.exceptions import CertificateError
from doh_edge.system.runner import CommandRunner

__all__ = ["AcmeClient", "CertificatePaths"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CertificatePaths:
    """Where certbot places the live certificate chain and key for a domain."""

    fullchain: Path
    privkey: Path

    def exist(self) -> bool:
        return self.fullchain.is_file() and self.privkey.is_file()


class AcmeClient:
    """
    Requests certificates from Let's Encrypt via certbot.

    Args:
        runner: Command runner.
        live_dir: certbot's ``live`` directory.
        http_port: Port certbot's standalone server binds for HTTP-01.
        staging: Use the staging CA.
    """

    def __init__(
        self,
        runner: CommandRunner,
        live_dir: str | Path = "/etc/letsencrypt/live",
        http_port: int = 80,
        staging: bool = False,
    ) -> None:
        self._runner = runner
        self._live_dir = Path(live_dir)
        self._http_port = http_port
        self._staging = staging

    @property
    def http_port(self) -> int:
        return self._http_port

    def paths_for(self, domain: str) -> CertificatePaths:
        base = self._live_dir / domain
        return CertificatePaths(
            fullchain=base / "fullchain.pem",
            privkey=base / "privkey.pem",
        )

    def obtain(self, domain: str, email: str) -> CertificatePaths:
        """
        Issue a certificate for ``domain`` unless one is already live.

        Returns:
            Paths to the certificate chain and private key.

        Raises:
            CertificateError: If certbot fails or leaves no certificate.
        """
        paths = self.paths_for(domain)
        if paths.exist():
            logger.info("Certificate for %s already present at %s", domain, paths.fullchain)
            return paths

        args = [
            "certbot",
            "certonly",
            "--standalone",
            "--non-interactive",
            "--agree-tos",
            "--keep-until-expiring",
            "--http-01-port",
            str(self._http_port),
            "-m",
            email,
            "-d",
            domain,
        ]
        if self._staging:
            args.append("--staging")

        logger.info("Requesting certificate for %s", domain)
        self._runner.run(args, error_cls=CertificateError)

        if not paths.exist():
            raise CertificateError(
                f"certbot reported success but no certificate was found for {domain}",
                tool="certbot",
                details={"fullchain": str(paths.fullchain)},
            )
        return paths
