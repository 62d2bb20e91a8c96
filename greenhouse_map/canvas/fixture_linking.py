"""
Fixture Linking
===============

Links add-form drafts to existing growbeds and fish tanks.

The editor treats component metadata as opaque; only these helpers read
and write the `growbed_*` / `fishtank_*` keys.
"""

from typing import Iterable, List

from ..models.catalog_models import (
    DEFAULT_FISHTANK_TYPE, FISHTANK_COLOR, CatalogFixture, FixtureKind, growbed_color
)
from ..models.layout_models import ComponentDraft, LayoutComponent


class FixtureAlreadyPlacedError(ValueError):
    """The fixture is already linked to a component on the map."""


def is_placed(fixture: CatalogFixture, components: Iterable[LayoutComponent]) -> bool:
    key = fixture.metadata_key
    for component in components:
        linked_id = (component.metadata or {}).get(key)
        # ids may come back from the store as text
        if linked_id is not None and str(linked_id) == str(fixture.id):
            return True
    return False


def available_fixtures(
    fixtures: Iterable[CatalogFixture],
    components: Iterable[LayoutComponent]
) -> List[CatalogFixture]:
    """Fixtures not yet placed on the map."""
    components = list(components)
    return [f for f in fixtures if not is_placed(f, components)]


def link_fixture(
    draft: ComponentDraft,
    fixture: CatalogFixture,
    components: Iterable[LayoutComponent]
) -> ComponentDraft:
    """Fill the draft from a catalog fixture and record the link in metadata."""
    if is_placed(fixture, components):
        raise FixtureAlreadyPlacedError(f"This {fixture.kind} is already placed on the map!")

    draft.change_type(fixture.kind)
    draft.name = fixture.name
    metadata = dict(draft.metadata)
    if fixture.kind == FixtureKind.GROWBED.value:
        draft.color = growbed_color(fixture.type)
        metadata["growbed_type"] = fixture.type
        metadata["growbed_id"] = fixture.id
    else:
        draft.color = FISHTANK_COLOR
        metadata["fishtank_type"] = fixture.type or DEFAULT_FISHTANK_TYPE
        metadata["fishtank_id"] = fixture.id
    draft.metadata = metadata
    return draft
