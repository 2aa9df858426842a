from datetime import datetime, timedelta, timezone

import pytest
from bson import ObjectId
from bson.errors import InvalidId
from pymongo.errors import OperationFailure

from climate_api.models import ClimateReading, DataFilter, RecordCreated
from climate_api.services.climate_repository import ClimateRepository
from climate_api.utils.validation import months_before


def _reading_document(oid, **overrides):
    document = {
        "_id": oid,
        "Device Name": "Woodford_Sensor",
        "Time": datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc),
        "Latitude": -26.95,
        "Longitude": 152.77,
        "Temperature (°C)": 22.6,
        "Atmospheric Pressure (kPa)": 128.3,
        "Max Wind Speed (m/s)": 4.9,
        "Solar Radiation (W/m2)": 551.2,
        "Vapor Pressure (kPa)": 1.7,
        "Humidity (%)": 73.8,
        "Wind Direction (°)": 155.6,
        "Precipitation mm/h": 12.5,
    }
    document.update(overrides)
    return document


class TestSetup:
    def test_uses_climate_data_collection(self, connection):
        ClimateRepository(connection)
        connection.get_collection.assert_called_once_with("ClimateData")


class TestGetById:
    def test_found(self, climate_repository, collection, object_id):
        collection.find_one.return_value = _reading_document(object_id)

        reading = climate_repository.get_by_id(str(object_id))

        collection.find_one.assert_called_once_with({"_id": object_id})
        assert reading.id == str(object_id)
        assert reading.precipitation == 12.5

    def test_not_found(self, climate_repository, collection, object_id):
        collection.find_one.return_value = None
        assert climate_repository.get_by_id(str(object_id)) is None

    def test_malformed_id_is_not_found(self, climate_repository, collection):
        assert climate_repository.get_by_id("not-an-object-id") is None
        collection.find_one.assert_not_called()


class TestGetMaxPrecipitation:
    def test_queries_lookback_window_sorted_by_precipitation(self, climate_repository, collection, object_id):
        collection.find_one.return_value = _reading_document(object_id, **{"Precipitation mm/h": 80.0})

        before = datetime.now(timezone.utc)
        reading = climate_repository.get_max_precipitation()
        after = datetime.now(timezone.utc)

        assert reading.precipitation == 80.0
        args, kwargs = collection.find_one.call_args
        since = args[0]["Time"]["$gte"]
        assert months_before(before, 50) <= since <= months_before(after, 50)
        assert kwargs["sort"] == [("Precipitation mm/h", -1)]

    def test_lookback_is_configurable(self, connection, collection):
        collection.find_one.return_value = None
        repository = ClimateRepository(connection, precipitation_lookback_months=5)

        before = datetime.now(timezone.utc)
        assert repository.get_max_precipitation() is None
        since = collection.find_one.call_args[0][0]["Time"]["$gte"]
        assert abs(since - months_before(before, 5)) < timedelta(seconds=5)


class TestGetByTimeAndDevice:
    def test_exact_match_on_both_fields(self, climate_repository, collection, object_id):
        when = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)
        collection.find_one.return_value = _reading_document(object_id)

        reading = climate_repository.get_by_time_and_device(when, "Woodford_Sensor")

        collection.find_one.assert_called_once_with({"Device Name": "Woodford_Sensor", "Time": when})
        assert reading.solar_radiation == 551.2

    def test_no_match(self, climate_repository, collection):
        collection.find_one.return_value = None
        assert climate_repository.get_by_time_and_device(datetime.now(timezone.utc), "Nowhere") is None


def _run_sort_group(documents, pipeline):
    """Evaluate the $sort and $group stages against in-memory documents."""
    sort_stage = next(stage["$sort"] for stage in pipeline if "$sort" in stage)
    group_stage = next(stage["$group"] for stage in pipeline if "$group" in stage)

    (sort_key, direction), = sort_stage.items()
    ordered = sorted(documents, key=lambda doc: doc[sort_key], reverse=direction == -1)

    groups = {}
    for doc in ordered:
        key = doc[group_stage["_id"].lstrip("$")]
        if key in groups:
            continue
        row = {"_id": key}
        for field, accumulator in group_stage.items():
            if field != "_id":
                row[field] = doc[accumulator["$first"].lstrip("$")]
        groups[key] = row
    return list(groups.values())


class TestGetMaxTemperatures:
    def test_one_row_per_device_with_its_hottest_reading(self, climate_repository, collection):
        t = datetime(2024, 1, 1, tzinfo=timezone.utc)
        documents = [
            {"Device Name": "A", "Time": t, "Temperature (°C)": 25.0},
            {"Device Name": "A", "Time": t + timedelta(hours=1), "Temperature (°C)": 31.5},
            {"Device Name": "B", "Time": t + timedelta(hours=2), "Temperature (°C)": 29.0},
            {"Device Name": "C", "Time": t + timedelta(hours=3), "Temperature (°C)": 35.2},
            {"Device Name": "C", "Time": t + timedelta(hours=4), "Temperature (°C)": 12.0},
            {"Device Name": "B", "Time": t + timedelta(hours=5), "Temperature (°C)": 18.4},
        ]
        collection.aggregate.side_effect = lambda pipeline: _run_sort_group(documents, pipeline)

        rows = {row.device_name: row for row in climate_repository.get_max_temperatures(DataFilter())}

        assert set(rows) == {"A", "B", "C"}
        assert rows["A"].temperature == 31.5
        assert rows["A"].time == t + timedelta(hours=1)
        assert rows["B"].temperature == 29.0
        assert rows["C"].temperature == 35.2
        assert rows["C"].time == t + timedelta(hours=3)

    def test_pipeline_sorts_then_groups(self, climate_repository, collection):
        collection.aggregate.return_value = []
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        end = datetime(2024, 3, 1, tzinfo=timezone.utc)

        climate_repository.get_max_temperatures(DataFilter(created_from=start, created_to=end))

        pipeline = collection.aggregate.call_args[0][0]
        assert pipeline[0] == {"$match": {"Time": {"$gte": start, "$lte": end}}}
        assert pipeline[1] == {"$sort": {"Temperature (°C)": -1}}
        group = pipeline[2]["$group"]
        assert group["_id"] == "$Device Name"
        assert group["time"] == {"$first": "$Time"}
        assert group["temperature"] == {"$first": "$Temperature (°C)"}

    def test_no_filter_matches_everything(self, climate_repository, collection):
        collection.aggregate.return_value = []
        climate_repository.get_max_temperatures(None)
        assert collection.aggregate.call_args[0][0][0] == {"$match": {}}


class TestCreate:
    def test_time_is_insert_time(self, climate_repository, collection, object_id):
        collection.insert_one.return_value.inserted_id = object_id
        record = RecordCreated(
            device_name="Woodford_Sensor",
            time=datetime(2001, 1, 1, tzinfo=timezone.utc),
            precipitation=12.5,
        )

        before = datetime.now(timezone.utc)
        result = climate_repository.create(record)
        after = datetime.now(timezone.utc)

        document = collection.insert_one.call_args[0][0]
        assert before <= document["Time"] <= after
        assert document["Device Name"] == "Woodford_Sensor"
        assert document["Precipitation mm/h"] == 12.5
        assert result.success is True
        assert result.records_affected == 1
        assert result.value == str(object_id)

    def test_does_not_mutate_caller_record(self, climate_repository, collection, object_id):
        collection.insert_one.return_value.inserted_id = object_id
        original_time = datetime(2001, 1, 1, tzinfo=timezone.utc)
        record = RecordCreated(device_name="A", time=original_time)

        climate_repository.create(record)

        assert record.time == original_time


class TestCreateMany:
    def test_device_name_overridden_and_times_kept(self, climate_repository, collection):
        ids = [ObjectId(), ObjectId(), ObjectId()]
        collection.insert_many.return_value.inserted_ids = ids
        times = [datetime(2024, 1, day, tzinfo=timezone.utc) for day in (1, 2, 3)]
        records = [
            RecordCreated(device_name="Wrong", time=times[0], temperature=20.0),
            RecordCreated(time=times[1], temperature=21.0),
            RecordCreated(device_name="Other", time=times[2], temperature=22.0),
        ]

        result = climate_repository.create_many(records, "Woodford_Sensor")

        documents = collection.insert_many.call_args[0][0]
        assert len(documents) == 3
        assert all(doc["Device Name"] == "Woodford_Sensor" for doc in documents)
        assert [doc["Time"] for doc in documents] == times
        assert result.success is True
        assert result.records_affected == 3
        assert result.value == [str(i) for i in ids]

    def test_empty_batch(self, climate_repository, collection):
        result = climate_repository.create_many([], "Woodford_Sensor")
        assert result.success is False
        collection.insert_many.assert_not_called()


class TestReplace:
    def test_id_comes_from_path(self, climate_repository, collection, object_id):
        collection.replace_one.return_value.modified_count = 1
        body = ClimateReading(id=str(ObjectId()), device_name="A", temperature=18.0)

        result = climate_repository.replace(str(object_id), body)

        query, document = collection.replace_one.call_args[0]
        assert query == {"_id": object_id}
        assert document["_id"] == object_id
        assert document["Device Name"] == "A"
        assert result.success is True
        assert result.records_affected == 1

    def test_nothing_modified(self, climate_repository, collection, object_id):
        collection.replace_one.return_value.modified_count = 0

        result = climate_repository.replace(str(object_id), ClimateReading(device_name="A"))

        assert result.success is False
        assert result.message == "No records replaced"
        assert result.records_affected == 0

    def test_malformed_id_raises(self, climate_repository, collection):
        with pytest.raises(InvalidId):
            climate_repository.replace("bad-id", ClimateReading(device_name="A"))
        collection.replace_one.assert_not_called()


class TestUpdatePrecipitation:
    def test_only_precipitation_is_set(self, climate_repository, collection, object_id):
        collection.update_one.return_value.modified_count = 1

        result = climate_repository.update_precipitation(str(object_id), 40.0)

        collection.update_one.assert_called_once_with(
            {"_id": object_id},
            {"$set": {"Precipitation mm/h": 40.0}},
        )
        assert result.success is True
        assert result.records_affected == 1

    def test_nothing_modified(self, climate_repository, collection, object_id):
        collection.update_one.return_value.modified_count = 0
        result = climate_repository.update_precipitation(str(object_id), 40.0)
        assert result.success is False
        assert result.message == "No values updated"

    def test_database_error_is_reported_not_raised(self, climate_repository, collection, object_id):
        collection.update_one.side_effect = OperationFailure("write blocked")

        result = climate_repository.update_precipitation(str(object_id), 40.0)

        assert result.success is False
        assert "write blocked" in result.message

    def test_malformed_id_is_reported_not_raised(self, climate_repository, collection):
        result = climate_repository.update_precipitation("bad-id", 40.0)
        assert result.success is False
        collection.update_one.assert_not_called()
