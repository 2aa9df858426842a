"""
Climate Models
==============
Pydantic models for the "ClimateData" collection.

The collection holds sensor data imported from spreadsheets, so the stored
documents use the spreadsheet column names as keys ("Device Name",
"Precipitation mm/h", ...). The API itself speaks snake_case.

HOW THE TWO NAMINGS FIT TOGETHER:
--------------------------------
- Each field's alias is the MongoDB key.
- populate_by_name lets a request body use either spelling.
- to_document() dumps by alias for MongoDB.
- Routes return by field name (response_model_by_alias=False).

Models in here:
- RecordCreated:      What a client sends to insert a reading
- ClimateReading:     A stored reading (RecordCreated + its _id)
- DataFilter:         Optional time range used by several queries
- MaxPrecipitation:   Projection returned by GetMaxPrecipitation
- TimeAndPlaceValues: Projection returned by GetValuesByTimeAndPlace
- NameTimeTemp:       One row of GetMaxTemperatures
"""

from datetime import datetime
from typing import Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# DOCUMENT KEYS
# =============================================================================

class ReadingKeys:
    """MongoDB keys of a climate reading document."""
    ID = "_id"
    DEVICE_NAME = "Device Name"
    TIME = "Time"
    LATITUDE = "Latitude"
    LONGITUDE = "Longitude"
    TEMPERATURE = "Temperature (°C)"
    ATMOSPHERIC_PRESSURE = "Atmospheric Pressure (kPa)"
    MAX_WIND_SPEED = "Max Wind Speed (m/s)"
    SOLAR_RADIATION = "Solar Radiation (W/m2)"
    VAPOR_PRESSURE = "Vapor Pressure (kPa)"
    HUMIDITY = "Humidity (%)"
    WIND_DIRECTION = "Wind Direction (°)"
    PRECIPITATION = "Precipitation mm/h"


# =============================================================================
# READINGS
# =============================================================================

class RecordCreated(BaseModel):
    """
    Request body for inserting a climate reading.

    Single inserts ignore `time` (the server stamps the insert time).
    Bulk inserts keep each record's own `time` and override `device_name`.

    Example Request:
        POST /api/climate?apiKey=...
        {
            "device_name": "Woodford_Sensor",
            "latitude": -26.95,
            "longitude": 152.77,
            "temperature": 22.6,
            "atmospheric_pressure": 128.3,
            "max_wind_speed": 4.9,
            "solar_radiation": 551.2,
            "vapor_pressure": 1.7,
            "humidity": 73.8,
            "wind_direction": 155.6,
            "precipitation": 0.085
        }
    """
    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    device_name: Optional[str] = Field(None, alias=ReadingKeys.DEVICE_NAME, description="Sensor/device name")
    time: Optional[datetime] = Field(None, alias=ReadingKeys.TIME, description="Reading timestamp (UTC)")
    latitude: Optional[float] = Field(None, alias=ReadingKeys.LATITUDE, description="Decimal degrees")
    longitude: Optional[float] = Field(None, alias=ReadingKeys.LONGITUDE, description="Decimal degrees")
    temperature: Optional[float] = Field(None, alias=ReadingKeys.TEMPERATURE, description="Temperature in °C")
    atmospheric_pressure: Optional[float] = Field(None, alias=ReadingKeys.ATMOSPHERIC_PRESSURE, description="kPa")
    max_wind_speed: Optional[float] = Field(None, alias=ReadingKeys.MAX_WIND_SPEED, description="m/s")
    solar_radiation: Optional[float] = Field(None, alias=ReadingKeys.SOLAR_RADIATION, description="W/m²")
    vapor_pressure: Optional[float] = Field(None, alias=ReadingKeys.VAPOR_PRESSURE, description="kPa")
    humidity: Optional[float] = Field(None, alias=ReadingKeys.HUMIDITY, description="Relative humidity %")
    wind_direction: Optional[float] = Field(None, alias=ReadingKeys.WIND_DIRECTION, description="Degrees")
    precipitation: Optional[float] = Field(None, alias=ReadingKeys.PRECIPITATION, description="mm/h")

    def to_document(self) -> dict:
        """MongoDB document for this reading, without any _id."""
        return self.model_dump(by_alias=True, exclude={"id"})


class ClimateReading(RecordCreated):
    """
    A stored climate reading.

    The id is the MongoDB ObjectId rendered as a 24 character hex string.
    On replace, whatever id the body carries is thrown away and the id from
    the URL is used instead.
    """
    id: Optional[str] = Field(None, alias=ReadingKeys.ID, description="MongoDB ObjectId (hex)")

    @field_validator("id", mode="before")
    @classmethod
    def _object_id_to_str(cls, value):
        if isinstance(value, ObjectId):
            return str(value)
        return value

    @classmethod
    def from_document(cls, document: dict) -> "ClimateReading":
        return cls.model_validate(document)


# =============================================================================
# FILTERS
# =============================================================================

class DataFilter(BaseModel):
    """
    Optional time range.

    Both bounds are inclusive. A missing bound means "no limit on that side",
    so an empty filter matches everything.
    """
    created_from: Optional[datetime] = Field(None, description="Lower bound (inclusive)")
    created_to: Optional[datetime] = Field(None, description="Upper bound (inclusive)")

    def range_query(self, key: str) -> dict:
        """
        Build the MongoDB filter for this range on `key`.

        Example:
            DataFilter(created_from=a).range_query("Time")
            -> {"Time": {"$gte": a}}
        """
        bounds = {}
        if self.created_from is not None:
            bounds["$gte"] = self.created_from
        if self.created_to is not None:
            bounds["$lte"] = self.created_to
        return {key: bounds} if bounds else {}


# =============================================================================
# RESPONSE PROJECTIONS
# =============================================================================

class MaxPrecipitation(BaseModel):
    """The wettest reading inside the lookback window."""
    device_name: Optional[str] = None
    time: Optional[datetime] = None
    temperature: Optional[float] = None
    precipitation: Optional[float] = None


class TimeAndPlaceValues(BaseModel):
    """Selected values of the reading taken by one device at one time."""
    temperature: Optional[float] = None
    atmospheric_pressure: Optional[float] = None
    solar_radiation: Optional[float] = None
    precipitation: Optional[float] = None


class NameTimeTemp(BaseModel):
    """Highest temperature recorded by a device, and when."""
    device_name: Optional[str] = None
    time: Optional[datetime] = None
    temperature: Optional[float] = None
