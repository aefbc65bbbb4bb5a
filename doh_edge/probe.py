"""
DoH Probe
~~~~~~~~~

End-to-end check of a freshly configured edge: one RFC 8484 query in
DNS wire format, POSTed to the public DoH endpoint.
"""

from __future__ import annotations

import logging
import struct

import httpx

from doh_edge.exceptions import ProbeError

__all__ = ["DohProbe", "build_query", "parse_header"]

logger = logging.getLogger(__name__)

DNS_MESSAGE = "application/dns-message"
_RCODES = {
    0: "NOERROR",
    1: "FORMERR",
    2: "SERVFAIL",
    3: "NXDOMAIN",
    4: "NOTIMP",
    5: "REFUSED",
}


def build_query(name: str, qtype: int = 1) -> bytes:
    """
    Encode a recursive query for ``name`` in DNS wire format.

    The message ID is 0, as RFC 8484 recommends for cache friendliness.
    """
    header = struct.pack("!HHHHHH", 0, 0x0100, 1, 0, 0, 0)
    qname = b""
    for label in name.rstrip(".").encode("idna").split(b"."):
        if not label or len(label) > 63:
            raise ValueError(f"Invalid DNS name: {name!r}")
        qname += bytes([len(label)]) + label
    return header + qname + b"\x00" + struct.pack("!HH", qtype, 1)


def parse_header(message: bytes) -> dict[str, int]:
    """Decode the fixed 12-byte DNS header."""
    if len(message) < 12:
        raise ValueError(f"DNS message too short: {len(message)} bytes")
    msg_id, flags, qdcount, ancount, nscount, arcount = struct.unpack(
        "!HHHHHH", message[:12]
    )
    return {
        "id": msg_id,
        "qr": flags >> 15,
        "rcode": flags & 0x000F,
        "qdcount": qdcount,
        "ancount": ancount,
        "nscount": nscount,
        "arcount": arcount,
    }


class DohProbe:
    """
    Sends one DoH query and checks the answer is a valid NOERROR response.

    Args:
        client: httpx client used for the request.
        query_name: Name to resolve.
    """

    def __init__(self, client: httpx.Client, query_name: str = "example.com") -> None:
        self._client = client
        self._query_name = query_name

    def check(self, url: str) -> dict[str, int]:
        """
        Query ``url`` and validate the response.

        Returns:
            The decoded response header.

        Raises:
            ProbeError: On transport errors, a non-200 status, the wrong
                content type, or a malformed or unsuccessful DNS answer.
        """
        query = build_query(self._query_name)
        try:
            response = self._client.post(
                url,
                content=query,
                headers={"content-type": DNS_MESSAGE, "accept": DNS_MESSAGE},
            )
        except httpx.HTTPError as exc:
            raise ProbeError(f"Request failed: {exc}", url=url) from exc

        if response.status_code != 200:
            raise ProbeError(f"HTTP status {response.status_code}", url=url)

        content_type = response.headers.get("content-type", "")
        if not content_type.startswith(DNS_MESSAGE):
            raise ProbeError(f"Unexpected content type {content_type!r}", url=url)

        try:
            header = parse_header(response.content)
        except ValueError as exc:
            raise ProbeError(str(exc), url=url) from exc

        if header["qr"] != 1:
            raise ProbeError("Response is not a DNS answer (QR bit clear)", url=url)
        if header["rcode"] != 0:
            rcode = _RCODES.get(header["rcode"], str(header["rcode"]))
            raise ProbeError(
                f"Resolver answered {rcode} for {self._query_name}", url=url
            )

        logger.info(
            "DoH probe to %s answered %d record(s) for %s",
            url,
            header["ancount"],
            self._query_name,
        )
        return header
