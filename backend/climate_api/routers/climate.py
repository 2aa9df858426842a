"""
Climate API Router
==================

Endpoints for reading and writing climate sensor readings.

ALL ENDPOINTS:
-------------
GET    /api/climate/GetMaxPrecipitation       - Wettest reading in the lookback window
GET    /api/climate/GetValuesByTimeAndPlace   - Reading by ?time=&deviceName=
GET    /api/climate/GetMaxTemperatures        - Hottest reading per device (?createdFrom=&createdTo=)
GET    /api/climate/{id}                      - One reading

POST   /api/climate                           - Insert a reading         (Teacher)
POST   /api/climate/CreateManyRecords         - Insert a batch           (Teacher)
PUT    /api/climate/{id}                      - Replace a reading        (Teacher)
PATCH  /api/climate/{id}?precipitation=       - Change precipitation     (Teacher)

Write endpoints need ?apiKey=<your key>.

The fixed paths are registered BEFORE /{id}, otherwise "GetMaxPrecipitation"
would be treated as an id.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from climate_api.models import (
    ClimateReading,
    DataFilter,
    MaxPrecipitation,
    NameTimeTemp,
    OperationResult,
    RecordCreated,
    TimeAndPlaceValues,
    UserAccount,
    UserRole,
)
from climate_api.routers.dependencies import (
    get_climate_repository,
    operation_response,
    require_role,
    server_error,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/climate", tags=["climate"])


# =============================================================================
# LOOKUPS
# =============================================================================

@router.get("/GetMaxPrecipitation", response_model=MaxPrecipitation)
def get_max_precipitation(repository=Depends(get_climate_repository)):
    """
    Get the highest precipitation reading in the lookback window.

    Returns only device name, time, temperature and precipitation.
    """
    try:
        reading = repository.get_max_precipitation()
    except Exception as e:
        raise server_error("get max precipitation", e)

    if reading is None:
        raise HTTPException(status_code=404, detail="No readings in the lookback window")

    return MaxPrecipitation(
        device_name=reading.device_name,
        time=reading.time,
        temperature=reading.temperature,
        precipitation=reading.precipitation,
    )


@router.get("/GetValuesByTimeAndPlace", response_model=TimeAndPlaceValues)
def get_values_by_time_and_place(
    time: datetime = Query(..., description="Exact reading time (ISO 8601)"),
    device_name: str = Query(..., alias="deviceName", description="Device that took the reading"),
    repository=Depends(get_climate_repository),
):
    """
    Get temperature, atmospheric pressure, solar radiation and precipitation
    for the reading a device took at an exact time.
    """
    try:
        reading = repository.get_by_time_and_device(time, device_name)
    except Exception as e:
        raise server_error("get values by time and place", e)

    if reading is None:
        raise HTTPException(status_code=404, detail=f"No reading from {device_name} at {time.isoformat()}")

    return TimeAndPlaceValues(
        temperature=reading.temperature,
        atmospheric_pressure=reading.atmospheric_pressure,
        solar_radiation=reading.solar_radiation,
        precipitation=reading.precipitation,
    )


@router.get("/GetMaxTemperatures", response_model=list[NameTimeTemp])
def get_max_temperatures(
    created_from: Optional[datetime] = Query(None, alias="createdFrom"),
    created_to: Optional[datetime] = Query(None, alias="createdTo"),
    repository=Depends(get_climate_repository),
):
    """
    Get the highest temperature of every device.

    Optional ?createdFrom= and ?createdTo= limit which readings count.
    One row per device: device name, time and temperature.
    """
    try:
        return repository.get_max_temperatures(DataFilter(created_from=created_from, created_to=created_to))
    except Exception as e:
        raise server_error("get max temperatures", e)


# =============================================================================
# CREATE
# =============================================================================

@router.post("", response_model=OperationResult, status_code=201)
def create_record(
    record: RecordCreated,
    caller: UserAccount = Depends(require_role(UserRole.TEACHER)),
    repository=Depends(get_climate_repository),
):
    """
    Insert a new reading.

    The reading's time is set to the moment it is stored; any `time` in the
    body is ignored.
    """
    try:
        result = repository.create(record)
    except Exception as e:
        raise server_error("create climate record", e)
    return operation_response(result)


@router.post("/CreateManyRecords", response_model=OperationResult, status_code=201)
def create_many_records(
    records: list[RecordCreated],
    device_name: str = Query(..., alias="deviceName", description="Device every record belongs to"),
    caller: UserAccount = Depends(require_role(UserRole.TEACHER)),
    repository=Depends(get_climate_repository),
):
    """
    Insert a batch of readings from one device.

    Every record gets ?deviceName=; each record keeps the `time` it was sent
    with.
    """
    try:
        result = repository.create_many(records, device_name)
    except Exception as e:
        raise server_error("create climate records", e)
    return operation_response(result)


# =============================================================================
# SINGLE RECORD
# =============================================================================

@router.get("/{id}", response_model=ClimateReading, response_model_by_alias=False)
def get_record_by_id(id: str, repository=Depends(get_climate_repository)):
    """Get one reading by its id."""
    try:
        reading = repository.get_by_id(id)
    except Exception as e:
        raise server_error("get climate record", e)

    if reading is None:
        raise HTTPException(status_code=404, detail="Record not found")
    return reading


@router.put("/{id}", response_model=OperationResult)
def replace_record(
    id: str,
    reading: ClimateReading,
    caller: UserAccount = Depends(require_role(UserRole.TEACHER)),
    repository=Depends(get_climate_repository),
):
    """
    Rewrite a whole reading.

    Every field is replaced with what you send. The id always stays the one
    in the URL, even if the body has a different one.
    """
    try:
        result = repository.replace(id, reading)
    except Exception as e:
        raise server_error("replace climate record", e)
    return operation_response(result)


@router.patch("/{id}", response_model=OperationResult)
def update_precipitation(
    id: str,
    precipitation: float = Query(..., allow_inf_nan=False, description="New precipitation value (mm/h)"),
    caller: UserAccount = Depends(require_role(UserRole.TEACHER)),
    repository=Depends(get_climate_repository),
):
    """Change the precipitation value of one reading. Nothing else changes."""
    try:
        result = repository.update_precipitation(id, precipitation)
    except Exception as e:
        raise server_error("update precipitation", e)
    return operation_response(result)
