"""Canonical ``sandbox:`` locator strings for roots and confined paths.

Format::

    sandbox:<root-directory-as-file-uri>[!<relative-path>][#UNCHECKED_SYMLINKS]

The root URI and the relative path are percent-encoded, so neither can
contain a literal ``!`` or ``#``. Without a ``!`` part the locator names
the root itself. The fragment is present only for UNCHECKED_SYMLINKS
roots; its absence means STRICT.
"""

from dataclasses import dataclass
from pathlib import Path, PurePath, PurePosixPath
from typing import TYPE_CHECKING, Optional
from urllib.parse import quote, unquote, urlsplit
from urllib.request import url2pathname

from pathbox.domain.errors import LocatorError
from pathbox.domain.policy import JailbreakPolicy

if TYPE_CHECKING:
    from pathbox.domain.confined_path import ConfinedPath
    from pathbox.lifecycle.registry import RootRegistry

SCHEME = "sandbox"
PREFIX = SCHEME + ":"
PATH_SEPARATOR = "!"
UNCHECKED_FRAGMENT = JailbreakPolicy.UNCHECKED_SYMLINKS.value


@dataclass(frozen=True)
class Locator:
    """Parsed form of a locator string."""

    root_path: Path
    policy: JailbreakPolicy
    relative_path: Optional[PurePosixPath] = None


def encode_locator(
    root_path: PurePath,
    policy: JailbreakPolicy,
    relative_path: Optional[PurePath] = None,
) -> str:
    """Render a locator for ``root_path`` and an optional root-relative path."""
    text = PREFIX + root_path.as_uri()
    if relative_path is not None:
        text += PATH_SEPARATOR + "/".join(quote(part, safe="") for part in relative_path.parts)
    if policy is JailbreakPolicy.UNCHECKED_SYMLINKS:
        text += "#" + UNCHECKED_FRAGMENT
    return text


def parse_locator(text: str) -> Locator:
    """Split a locator into root directory, policy and relative path."""
    if not text.startswith(PREFIX):
        raise LocatorError(text, f"expected the {SCHEME!r} scheme")

    body, has_fragment, fragment = text[len(PREFIX) :].partition("#")
    if not has_fragment:
        policy = JailbreakPolicy.STRICT
    elif fragment == UNCHECKED_FRAGMENT:
        policy = JailbreakPolicy.UNCHECKED_SYMLINKS
    else:
        raise LocatorError(text, f"unknown policy fragment {fragment!r}")

    root_uri, has_path, encoded_path = body.partition(PATH_SEPARATOR)
    root_path = _root_from_file_uri(text, root_uri)

    relative_path = None
    if has_path:
        relative_path = PurePosixPath(unquote(encoded_path)) if encoded_path else PurePosixPath()
    return Locator(root_path, policy, relative_path)


def decode_locator(text: str, registry: "RootRegistry") -> "ConfinedPath":
    """Re-acquire the locator's root from ``registry`` and rebuild the confined path.

    The relative part is validated like any other candidate, so a forged
    locator cannot name a location outside its root.
    """
    locator = parse_locator(text)
    root = registry.acquire(locator.root_path, policy=locator.policy)
    if locator.relative_path is None or not locator.relative_path.parts:
        return root.get_root()
    return root.of(*locator.relative_path.parts)


def _root_from_file_uri(text: str, root_uri: str) -> Path:
    parsed = urlsplit(root_uri)
    if parsed.scheme != "file":
        raise LocatorError(text, "root must be a file URI")
    if parsed.netloc not in ("", "localhost"):
        raise LocatorError(text, f"remote file host {parsed.netloc!r} is not supported")
    if not parsed.path:
        raise LocatorError(text, "root URI has no path")
    root_path = Path(url2pathname(parsed.path))
    if not root_path.is_absolute():
        raise LocatorError(text, "root URI path is not absolute")
    return root_path
