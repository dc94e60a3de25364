"""Asset filtering and disambiguation."""

from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from binfetch.errors import InvalidSelectionError, MissingInputError, NoMatchingAssetError
from binfetch.logging import get_logger
from binfetch.platforms import matches_platform
from binfetch.types import Asset, PlatformSpec

logger = get_logger(__name__)

Reader = Callable[[str], str]
Writer = Callable[[str], None]


def format_size(size: int) -> str:
    """Human-readable byte count."""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / 1024 / 1024:.1f} MB"


def parse_exclude(value: Optional[str]) -> Tuple[str, ...]:
    """Split a comma-separated exclusion list into lowercased words."""
    if not value:
        return ()
    return tuple(w for w in (part.strip().lower() for part in value.split(",")) if w)


def filter_candidates(
    assets: Iterable[Asset],
    spec: PlatformSpec,
    exclude: Sequence[str] = (),
) -> List[Asset]:
    """Assets built for the platform whose names contain no excluded word.

    Release order is preserved.
    """
    words = [w.strip().lower() for w in exclude if w.strip()]
    candidates = []
    for asset in assets:
        name = asset.name.lower()
        if not matches_platform(name, spec):
            continue
        if any(word in name for word in words):
            continue
        candidates.append(asset)
    return candidates


def parse_choice(raw: str, count: int) -> int:
    """Turn a 1-based answer into a list index."""
    try:
        choice = int(raw.strip())
    except ValueError:
        raise InvalidSelectionError(raw, count) from None
    if not 1 <= choice <= count:
        raise InvalidSelectionError(raw, count)
    return choice - 1


def prompt_for_asset(candidates: Sequence[Asset], read: Reader, write: Writer) -> Asset:
    """Ask the user to pick one candidate, until the answer is valid."""
    write("Multiple assets found. Select one:")
    for i, asset in enumerate(candidates, start=1):
        write(f"{i}. {asset.name} ({format_size(asset.size)})")

    while True:
        try:
            raw = read(f"Enter choice (1-{len(candidates)}): ")
        except EOFError:
            raise MissingInputError("No asset selected: input closed") from None
        try:
            return candidates[parse_choice(raw, len(candidates))]
        except InvalidSelectionError as e:
            logger.debug("invalid_selection", **e.details)
            write(str(e))


def select_asset(
    assets: Sequence[Asset],
    spec: PlatformSpec,
    exclude: Sequence[str] = (),
    auto_first: bool = False,
    read: Reader = input,
    write: Writer = print,
) -> Asset:
    """Pick exactly one asset for the platform.

    Raises:
        NoMatchingAssetError: nothing survives the filters
        MissingInputError: input closed while prompting
    """
    candidates = filter_candidates(assets, spec, exclude)
    logger.debug(
        "asset_candidates",
        platform=str(spec),
        exclude=list(exclude),
        candidates=[a.name for a in candidates],
    )

    if not candidates:
        raise NoMatchingAssetError(spec.os.value, spec.arch.value)
    if len(candidates) == 1 or auto_first:
        return candidates[0]
    return prompt_for_asset(candidates, read, write)
