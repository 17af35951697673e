"""Version manager: duplicate, set primary and delete itinerary proposals."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from tripcraft.errors import InvalidInputError, NotFoundError
from tripcraft.models.common import new_id, utcnow
from tripcraft.models.segment import SegmentVariant, TripSegment
from tripcraft.models.trip import TripVersion


@dataclass
class DuplicatedVersion:
    """A cloned version with its cloned segments and variants."""

    version: TripVersion
    segments: list[TripSegment]
    variants: list[SegmentVariant]


def _find(versions: Sequence[TripVersion], version_id: str) -> TripVersion:
    for version in versions:
        if version.id == version_id:
            return version
    raise NotFoundError("version", version_id)


def next_version_number(versions: Sequence[TripVersion]) -> int:
    return max((v.version_number for v in versions), default=0) + 1


def next_version_name(versions: Sequence[TripVersion]) -> str:
    """Sequential name, "Version N"."""
    return f"Version {next_version_number(versions)}"


def duplicate_version(
    source: TripVersion,
    versions: Sequence[TripVersion],
    segments: Iterable[TripSegment],
    variants: Iterable[SegmentVariant] = (),
    *,
    name: str | None = None,
) -> DuplicatedVersion:
    """Clone a version with all of its segments, groups and variants.

    Every clone gets a fresh id. Journey and property group ids are remapped
    consistently, so cloned legs stay chained to each other and never to the
    source's legs. The clone is never primary and starts with no client
    selections.
    """
    number = next_version_number(versions)
    now = utcnow()
    version = source.model_copy(
        update={
            "id": new_id(),
            "version_number": number,
            "name": name or f"Version {number}",
            "is_primary": False,
            "created_at": now,
        }
    )

    group_ids: dict[str, str] = {}

    def remap(group_id: str | None) -> str | None:
        if not group_id:
            return group_id
        return group_ids.setdefault(group_id, new_id())

    segment_ids: dict[str, str] = {}
    cloned_segments: list[TripSegment] = []
    for segment in segments:
        if segment.version_id != source.id:
            continue
        clone_id = new_id()
        segment_ids[segment.id] = clone_id
        cloned_segments.append(
            segment.model_copy(
                update={
                    "id": clone_id,
                    "version_id": version.id,
                    "metadata": dict(segment.metadata),
                    "journey_id": remap(segment.journey_id),
                    "property_group_id": remap(segment.property_group_id),
                    "created_at": now,
                    "updated_at": now,
                }
            )
        )

    cloned_variants = [
        variant.model_copy(
            update={"id": new_id(), "segment_id": segment_ids[variant.segment_id], "created_at": now}
        )
        for variant in variants
        if variant.segment_id in segment_ids
    ]

    return DuplicatedVersion(version=version, segments=cloned_segments, variants=cloned_variants)


def set_primary(versions: Sequence[TripVersion], version_id: str) -> list[TripVersion]:
    """Make exactly one version primary.

    Raises:
        NotFoundError: If version_id is not among the trip's versions
    """
    _find(versions, version_id)
    return [v.model_copy(update={"is_primary": v.id == version_id}) for v in versions]


def check_deletable(versions: Sequence[TripVersion], version_id: str) -> TripVersion:
    """Validate that a version may be deleted.

    Raises:
        NotFoundError: If the version is unknown
        InvalidInputError: If it is the primary or the trip's only version
    """
    version = _find(versions, version_id)
    if len(versions) <= 1:
        raise InvalidInputError("Cannot delete the only version of a trip")
    if version.is_primary:
        raise InvalidInputError("Cannot delete the primary version; make another version primary first")
    return version


def resolve_active_version(
    versions: Sequence[TripVersion], requested_id: str | None = None
) -> TripVersion | None:
    """Version a client sees: the requested one, else the primary, else the first.

    An unknown requested id yields None rather than a fallback.
    """
    if requested_id:
        return next((v for v in versions if v.id == requested_id), None)
    for version in versions:
        if version.is_primary:
            return version
    return versions[0] if versions else None
