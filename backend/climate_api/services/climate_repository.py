"""
Climate Repository
==================

Everything that touches the "ClimateData" collection goes through here.

WHAT THIS DOES:
--------------
GET side:
    get_by_id                 - one reading by its ObjectId
    get_max_precipitation     - wettest reading inside the lookback window
    get_by_time_and_device    - reading taken by a device at an exact time
    get_max_temperatures      - hottest reading per device (aggregation)

WRITE side:
    create                    - insert one reading, stamped with "now"
    create_many               - insert a batch for one device, keeping their times
    replace                   - overwrite a reading but keep its _id
    update_precipitation      - change just the precipitation value

Reads return a model or None. Writes return an OperationResult so the
router can pick 200 or 400 without catching anything.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING
from pymongo.errors import PyMongoError

from climate_api.models import (
    ClimateReading,
    DataFilter,
    NameTimeTemp,
    OperationResult,
    ReadingKeys,
    RecordCreated,
)
from climate_api.services.mongo_connection import MongoConnection
from climate_api.utils.validation import months_before, parse_object_id

logger = logging.getLogger(__name__)


class ClimateRepository:
    """Reads and writes climate readings."""

    COLLECTION_NAME = "ClimateData"

    def __init__(self, connection: MongoConnection, precipitation_lookback_months: int = 50):
        """
        Args:
            connection: Shared MongoDB connection
            precipitation_lookback_months: How far back GetMaxPrecipitation looks
        """
        self._readings = connection.get_collection(self.COLLECTION_NAME)
        self.precipitation_lookback_months = precipitation_lookback_months

    # =========================================================================
    # READS
    # =========================================================================

    def get_by_id(self, reading_id: str) -> Optional[ClimateReading]:
        """
        Find one reading.

        A malformed id can't match anything, so it comes back as None just
        like an id that isn't in the collection.
        """
        object_id = parse_object_id(reading_id)
        if object_id is None:
            logger.debug(f"Malformed reading id: {reading_id!r}")
            return None

        document = self._readings.find_one({ReadingKeys.ID: object_id})
        return ClimateReading.from_document(document) if document else None

    def get_max_precipitation(self) -> Optional[ClimateReading]:
        """Highest precipitation among readings newer than the lookback window."""
        since = months_before(datetime.now(timezone.utc), self.precipitation_lookback_months)
        document = self._readings.find_one(
            {ReadingKeys.TIME: {"$gte": since}},
            sort=[(ReadingKeys.PRECIPITATION, DESCENDING)],
        )
        return ClimateReading.from_document(document) if document else None

    def get_by_time_and_device(self, time: datetime, device_name: str) -> Optional[ClimateReading]:
        document = self._readings.find_one({
            ReadingKeys.DEVICE_NAME: device_name,
            ReadingKeys.TIME: time,
        })
        return ClimateReading.from_document(document) if document else None

    def get_max_temperatures(self, data_filter: Optional[DataFilter] = None) -> list[NameTimeTemp]:
        """
        Hottest reading for every device.

        Sorts by temperature (highest first), then groups by device and keeps
        the first record's time and temperature. Which of two equally hot
        readings wins is up to MongoDB.
        """
        match = data_filter.range_query(ReadingKeys.TIME) if data_filter else {}
        pipeline = [
            {"$match": match},
            {"$sort": {ReadingKeys.TEMPERATURE: DESCENDING}},
            {"$group": {
                "_id": f"${ReadingKeys.DEVICE_NAME}",
                "time": {"$first": f"${ReadingKeys.TIME}"},
                "temperature": {"$first": f"${ReadingKeys.TEMPERATURE}"},
            }},
        ]
        return [
            NameTimeTemp(device_name=row["_id"], time=row.get("time"), temperature=row.get("temperature"))
            for row in self._readings.aggregate(pipeline)
        ]

    # =========================================================================
    # WRITES
    # =========================================================================

    def create(self, record: RecordCreated) -> OperationResult:
        """
        Insert one reading.

        The stored time is always the insert time; whatever `time` the
        caller sent is ignored.
        """
        reading = record.model_copy(update={"time": datetime.now(timezone.utc)})
        result = self._readings.insert_one(reading.to_document())
        logger.info(f"Created climate record {result.inserted_id} for {reading.device_name}")
        return OperationResult(
            message="Record created successfully",
            success=True,
            records_affected=1,
            value=str(result.inserted_id),
        )

    def create_many(self, records: list[RecordCreated], device_name: str) -> OperationResult:
        """
        Insert a batch of readings from one device.

        Unlike create(), each record keeps its own `time`. The device name on
        every record is replaced with `device_name`.
        """
        documents = [
            record.model_copy(update={"device_name": device_name}).to_document()
            for record in records
        ]
        if not documents:
            return OperationResult.failed("No records supplied")

        result = self._readings.insert_many(documents)
        inserted = len(result.inserted_ids)
        logger.info(f"Created {inserted} climate records for {device_name}")
        return OperationResult(
            message=f"{inserted} records created successfully",
            success=True,
            records_affected=inserted,
            value=[str(inserted_id) for inserted_id in result.inserted_ids],
        )

    def replace(self, reading_id: str, reading: ClimateReading) -> OperationResult:
        """
        Overwrite a whole reading.

        The stored _id always comes from `reading_id`, never from the body.

        Raises:
            bson.errors.InvalidId: if `reading_id` isn't a valid ObjectId
        """
        object_id = ObjectId(reading_id)
        document = reading.to_document()
        document[ReadingKeys.ID] = object_id

        result = self._readings.replace_one({ReadingKeys.ID: object_id}, document)
        if result.modified_count == 1:
            logger.info(f"Replaced climate record {reading_id}")
            return OperationResult(
                message="Record replaced successfully",
                success=True,
                records_affected=result.modified_count,
            )
        return OperationResult.failed("No records replaced")

    def update_precipitation(self, reading_id: str, precipitation: float) -> OperationResult:
        """
        Set the precipitation of one reading.

        Nothing escapes this method: a bad id or a database error comes back
        as a failed result carrying the error message.
        """
        try:
            result = self._readings.update_one(
                {ReadingKeys.ID: ObjectId(reading_id)},
                {"$set": {ReadingKeys.PRECIPITATION: precipitation}},
            )
        except (InvalidId, PyMongoError) as e:
            logger.error(f"Error updating precipitation on {reading_id}: {e}")
            return OperationResult.failed(str(e))

        if result.modified_count == 1:
            logger.info(f"Precipitation on {reading_id} set to {precipitation}")
            return OperationResult(
                message="Precipitation value updated successfully",
                success=True,
                records_affected=result.modified_count,
            )
        return OperationResult.failed("No values updated")
