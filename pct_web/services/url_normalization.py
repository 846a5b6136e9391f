import ipaddress
import re
from dataclasses import dataclass, field
from urllib.parse import urlsplit

_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*://", flags=re.IGNORECASE)


class UrlNormalizer:
    """Strategy interface."""
    def normalize(self, s: str) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class GuessComUrlNormalizer(UrlNormalizer):
    """
    Turns what people type into a product URL field into an absolute URL:
      notion.so        -> https://notion.so
      evernote/pricing -> https://evernote.com/pricing   (guess_com_if_no_dot)
    Anything that already carries a scheme is left alone so validation can judge it.
    """
    default_scheme: str = "https"
    guess_com_if_no_dot: bool = True
    no_guess_hosts: frozenset[str] = field(default_factory=frozenset)

    def normalize(self, s: str) -> str:
        s = (s or "").strip()
        if not s:
            return ""

        if _SCHEME_RE.match(s):
            return s

        host, sep, rest = s.partition("/")
        host = host.strip()
        if not host:
            return s

        no_guess = {h.lower() for h in self.no_guess_hosts}
        bare_host = host.split(":", 1)[0].lower()
        if self.guess_com_if_no_dot and "." not in host and bare_host not in no_guess:
            host = host + ".com"

        return f"{self.default_scheme}://{host}{sep}{rest}"


# hostname as urlsplit reports it (lowercased, brackets stripped); IDN labels are checked after idna encoding
_HOST_LABEL_RE = re.compile(r"^(?!-)[a-z0-9-]{1,63}(?<!-)$")


def _valid_hostname(host: str) -> bool:
    if ":" in host:
        try:
            ipaddress.IPv6Address(host)
        except ValueError:
            return False
        return True
    try:
        ascii_host = host.encode("idna").decode("ascii")
    except UnicodeError:
        return False
    labels = ascii_host.rstrip(".").split(".")
    return all(_HOST_LABEL_RE.match(label) for label in labels)


def is_absolute_http_url(url: str) -> bool:
    url = (url or "").strip()
    if any(c.isspace() for c in url):
        return False
    try:
        parts = urlsplit(url)
        # .port raises on out-of-range or non-numeric ports
        parts.port
    except ValueError:
        return False
    if parts.scheme.lower() not in ("http", "https") or not parts.hostname:
        return False
    return _valid_hostname(parts.hostname)
