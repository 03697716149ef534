"""Custom data generators for campaignflow property-based testing.

The generators build campaign documents around the bundled IEA Task 43
schema. Locations pick any station type (or none) and carry any mix of
configuration groups, so both consistent and conflicting documents come
out. Helper fields can be sprinkled into any object of a document.
"""

from copy import deepcopy
from typing import Any

import hypothesis.strategies as st

from tests.fixtures import LIDAR_LOCATION, MAST_LOCATION, REANALYSIS_LOCATION, make_document

STATION_TYPES = (
    "mast",
    "lidar",
    "sodar",
    "floating_lidar",
    "wave_buoy",
    "adcp",
    "solar",
    "virtual_met_mast",
    "reanalysis",
)

HELPER_NAMES = (
    "campaignStatus",
    "startDate",
    "endDate",
    "unit",
    "temp_id",
    "ui_state",
    "validation_state",
    "is_dirty",
    "last_modified_by",
)

GROUP_FIELDS = ("mast_properties", "vertical_profiler_properties", "logger_main_config", "model_config")

GROUP_VALUES = {
    "mast_properties": MAST_LOCATION["mast_properties"],
    "vertical_profiler_properties": LIDAR_LOCATION["vertical_profiler_properties"],
    "logger_main_config": MAST_LOCATION["logger_main_config"],
    "model_config": REANALYSIS_LOCATION["model_config"],
}


def station_type() -> st.SearchStrategy[str]:
    return st.sampled_from(STATION_TYPES)


def helper_value() -> st.SearchStrategy[Any]:
    return st.one_of(
        st.none(),
        st.booleans(),
        st.integers(min_value=-1000, max_value=1000),
        st.text(max_size=20),
        st.dictionaries(st.sampled_from(["open", "tab"]), st.booleans(), max_size=2),
    )


@st.composite
def location(draw, station_types: st.SearchStrategy[str | None] | None = None) -> dict[str, Any]:
    """Generate a measurement location with any set of configuration groups.

    Group contents are valid on their own; whether a group belongs to the
    drawn station type is left to chance.
    """
    types = station_types if station_types is not None else st.one_of(st.none(), station_type())
    result = deepcopy(MAST_LOCATION)
    for name in GROUP_FIELDS:
        result.pop(name, None)

    result["name"] = draw(st.text(min_size=1, max_size=20))
    result["latitude_ddeg"] = draw(st.floats(min_value=-120, max_value=120, allow_nan=False))
    result["longitude_ddeg"] = draw(st.floats(min_value=-180, max_value=180, allow_nan=False))

    chosen_type = draw(types)
    if chosen_type is None:
        del result["measurement_station_type_id"]
    else:
        result["measurement_station_type_id"] = chosen_type

    for name in draw(st.sets(st.sampled_from(GROUP_FIELDS))):
        result[name] = deepcopy(GROUP_VALUES[name])
    if not draw(st.booleans()):
        result["measurement_point"] = []
    return result


@st.composite
def campaign_document(draw, min_locations: int = 1, max_locations: int = 3) -> dict[str, Any]:
    """Generate a full campaign document with drawn locations."""
    locations = draw(st.lists(location(), min_size=min_locations, max_size=max_locations))
    document = make_document(*locations)
    if draw(st.booleans()):
        del document["license"]
    if draw(st.booleans()):
        document["plant_name"] = draw(st.sampled_from(["", "  ", "South Ridge"]))
    return document


def _objects(value: Any) -> list[dict[str, Any]]:
    """Every dict in a document, the document itself first."""
    found = []
    if isinstance(value, dict):
        found.append(value)
        for child in value.values():
            found.extend(_objects(child))
    elif isinstance(value, list):
        for child in value:
            found.extend(_objects(child))
    return found


@st.composite
def document_with_helpers(draw, base: st.SearchStrategy[dict[str, Any]] | None = None) -> dict[str, Any]:
    """Generate a document with helper fields inserted into random objects."""
    document = draw(base if base is not None else campaign_document())
    objects = _objects(document)
    count = draw(st.integers(min_value=0, max_value=6))
    for _ in range(count):
        target = draw(st.sampled_from(objects))
        target[draw(st.sampled_from(HELPER_NAMES))] = draw(helper_value())
    return document
