from unittest.mock import MagicMock, patch

from pymongo.errors import ServerSelectionTimeoutError

from climate_api.services.mongo_connection import MongoConnection


class TestMongoConnection:
    @patch("climate_api.services.mongo_connection.MongoClient")
    def test_client_options(self, mock_client_cls: MagicMock) -> None:
        """Timeouts and pool size are explicit; the driver never retries."""
        MongoConnection(
            "mongodb://db:27017",
            "ClimateDataDB",
            server_selection_timeout_ms=1000,
            connect_timeout_ms=2000,
            socket_timeout_ms=3000,
            max_pool_size=7,
        )

        mock_client_cls.assert_called_once()
        args, kwargs = mock_client_cls.call_args
        assert args == ("mongodb://db:27017",)
        assert kwargs["serverSelectionTimeoutMS"] == 1000
        assert kwargs["connectTimeoutMS"] == 2000
        assert kwargs["socketTimeoutMS"] == 3000
        assert kwargs["maxPoolSize"] == 7
        assert kwargs["retryReads"] is False
        assert kwargs["retryWrites"] is False
        assert kwargs["tz_aware"] is True

    @patch("climate_api.services.mongo_connection.MongoClient")
    def test_one_client_shared_by_collections(self, mock_client_cls: MagicMock) -> None:
        connection = MongoConnection("mongodb://db:27017", "ClimateDataDB")
        connection.get_collection("ClimateData")
        connection.get_collection("UserAccounts")

        assert mock_client_cls.call_count == 1
        client = mock_client_cls.return_value
        client.__getitem__.assert_called_with("ClimateDataDB")
        client.__getitem__.return_value.__getitem__.assert_any_call("ClimateData")
        client.__getitem__.return_value.__getitem__.assert_any_call("UserAccounts")

    @patch("climate_api.services.mongo_connection.MongoClient")
    def test_get_other_database(self, mock_client_cls: MagicMock) -> None:
        connection = MongoConnection("mongodb://db:27017", "ClimateDataDB")
        connection.get_database("Archive")
        mock_client_cls.return_value.__getitem__.assert_called_with("Archive")

    @patch("climate_api.services.mongo_connection.MongoClient")
    def test_ping(self, mock_client_cls: MagicMock) -> None:
        connection = MongoConnection("mongodb://db:27017", "ClimateDataDB")
        assert connection.ping() is True
        mock_client_cls.return_value.admin.command.assert_called_once_with("ping")

    @patch("climate_api.services.mongo_connection.MongoClient")
    def test_ping_failure(self, mock_client_cls: MagicMock) -> None:
        mock_client_cls.return_value.admin.command.side_effect = ServerSelectionTimeoutError("no servers")
        connection = MongoConnection("mongodb://db:27017", "ClimateDataDB")
        assert connection.ping() is False

    @patch("climate_api.services.mongo_connection.MongoClient")
    def test_close(self, mock_client_cls: MagicMock) -> None:
        connection = MongoConnection("mongodb://db:27017", "ClimateDataDB")
        connection.close()
        mock_client_cls.return_value.close.assert_called_once()
