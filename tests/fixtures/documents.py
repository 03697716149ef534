"""Campaign documents for campaignflow tests.

Every location here is valid against the bundled schema; ``make_document``
wraps deep copies of them into a complete, exportable document.
"""

from copy import deepcopy
from typing import Any

MAST_LOCATION: dict[str, Any] = {
    "uuid": "4f9c1c1e-8b1a-4a57-9d0a-2f6c3b9e7a10",
    "name": "Mast 1",
    "latitude_ddeg": 55.5,
    "longitude_ddeg": -3.2,
    "measurement_station_type_id": "mast",
    "mast_properties": {
        "mast_geometry_id": "lattice_triangle",
        "mast_height_m": 80,
    },
    "logger_main_config": [
        {
            "logger_oem_id": "NRG Systems",
            "logger_serial_number": "SN-1001",
            "date_from": "2024-01-01T00:00:00",
            "date_to": None,
        }
    ],
    "measurement_point": [
        {
            "name": "WS_80m",
            "measurement_type_id": "wind_speed",
            "height_m": 80,
            "height_reference_id": "ground_level",
        },
        {
            "name": "WD_78m",
            "measurement_type_id": "wind_direction",
            "height_m": 78,
            "height_reference_id": "ground_level",
        },
    ],
}

REANALYSIS_LOCATION: dict[str, Any] = {
    "uuid": "9b2e6d4a-1c3f-4e8b-a7d5-6f0e2c4b8a91",
    "name": "ERA5 node",
    "latitude_ddeg": 55.6,
    "longitude_ddeg": -3.1,
    "measurement_station_type_id": "reanalysis",
    "model_config": [
        {
            "reanalysis_id": "ERA5",
            "date_from": "2000-01-01T00:00:00",
            "date_to": "2024-01-01T00:00:00",
        }
    ],
    "measurement_point": [],
}

LIDAR_LOCATION: dict[str, Any] = {
    "uuid": "0d7e3a52-6b41-4c9a-8f2e-1a5b7c9d3e64",
    "name": "Lidar 1",
    "latitude_ddeg": 55.4,
    "longitude_ddeg": -3.3,
    "measurement_station_type_id": "lidar",
    "vertical_profiler_properties": [
        {
            "date_from": "2024-02-01T00:00:00",
            "date_to": None,
        }
    ],
    "logger_main_config": [
        {
            "logger_oem_id": "other",
            "logger_serial_number": "LD-7",
            "date_from": "2024-02-01T00:00:00",
            "date_to": None,
        }
    ],
    "measurement_point": [],
}


def make_document(*locations: dict[str, Any]) -> dict[str, Any]:
    """Valid campaign document holding deep copies of ``locations``."""
    return {
        "author": "Jane Doe",
        "organisation": "Acme Wind",
        "date": "2024-05-01",
        "version": "1.4.0-2025.06",
        "plant_name": "North Ridge",
        "plant_type": "onshore_wind",
        "license": "BSD-3-Clause",
        "measurement_location": [deepcopy(location) for location in locations],
    }

